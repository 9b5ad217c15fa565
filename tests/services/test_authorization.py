import pytest

from scam_reports.services.authorization import AuthorizationResolver, Role

COMPANY = "biz_123"


@pytest.fixture
def authz(whop_client):
    return AuthorizationResolver(whop_client)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("user_id", "expected"),
    [
        ("user_owner", Role.owner),
        ("user_coowner", Role.owner),
        ("user_admin", Role.admin),
        ("user_mod", Role.admin),
        ("user_member", Role.member),
    ],
)
async def test_resolve_role(authz, user_id, expected):
    assert await authz.resolve_role(user_id, COMPANY) is expected


@pytest.mark.asyncio
async def test_owner_of_one_company_is_member_of_another(authz):
    assert await authz.is_company_owner("user_other_owner", "biz_456") is True
    assert await authz.resolve_role("user_other_owner", COMPANY) is Role.member


@pytest.mark.asyncio
async def test_team_membership_comes_from_roster(authz):
    assert await authz.is_team_member("user_admin", COMPANY) is True
    assert await authz.is_team_member("user_owner", COMPANY) is False
    assert await authz.get_authorized_user_role("user_mod", COMPANY) == "moderator"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("user_id", "allowed"),
    [("user_owner", True), ("user_coowner", True), ("user_admin", True), ("user_member", False)],
)
async def test_can_review(authz, user_id, allowed):
    assert await authz.can_review(user_id, COMPANY) is allowed


@pytest.mark.asyncio
async def test_company_lookup_failure_counts_as_not_owner(authz, fake_whop):
    fake_whop.failing.add("companies")

    assert await authz.is_company_owner("user_owner", COMPANY) is False
    # roster still answers
    assert await authz.can_review("user_admin", COMPANY) is True
    assert await authz.can_review("user_owner", COMPANY) is False


@pytest.mark.asyncio
async def test_roster_failure_counts_as_not_team_member(authz, fake_whop):
    fake_whop.failing.add("authorized_users")

    assert await authz.is_team_member("user_admin", COMPANY) is False
    assert await authz.resolve_role("user_admin", COMPANY) is Role.member
    assert await authz.resolve_role("user_owner", COMPANY) is Role.owner


@pytest.mark.asyncio
async def test_unknown_company(authz):
    assert await authz.resolve_role("user_owner", "biz_missing") is Role.member
    assert await authz.can_review("user_owner", "biz_missing") is False
