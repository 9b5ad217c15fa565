import pytest

from scam_reports.core.exceptions import NotFoundError
from scam_reports.services.users import UserLookupService


class _PagingWhop:
    """Member roster with more pages than the lookup needs; records when iteration is closed."""

    def __init__(self) -> None:
        self.closed: list[str] = []

    async def _pages(self, label: str):
        try:
            for i in range(3):
                yield {
                    "id": f"mber_{i}",
                    "user": {"id": f"user_{i}", "username": f"name{i}", "email": f"{i}@x.test"},
                    "status": "joined",
                }
        finally:
            self.closed.append(label)

    def list_members(self, company_id, *, query=None, user_ids=None, first=50):
        return self._pages("query" if query else "user_ids")

    async def retrieve_user(self, id_or_username):
        return {"id": "user_0", "username": "name0", "bio": "hi"}


@pytest.mark.asyncio
async def test_member_search_closes_roster_iteration():
    whop = _PagingWhop()

    profile = await UserLookupService(whop).lookup("name0", "biz_123")

    assert profile.id == "user_0"
    assert profile.bio == "hi"
    assert whop.closed == ["query"]


@pytest.mark.asyncio
async def test_direct_lookup_without_company(whop_client):
    profile = await UserLookupService(whop_client).lookup("@scammer1", None)

    assert profile.id == "user_scammer"
    assert profile.bio == "trust me"
    assert profile.email is None
    assert "joined_at" not in profile.model_fields_set


@pytest.mark.asyncio
async def test_blank_username_is_not_found(whop_client):
    with pytest.raises(NotFoundError):
        await UserLookupService(whop_client).lookup("@", "biz_123")
