import pytest

from scam_reports.services.enforcement import ban_user_from_company

COMPANY = "biz_123"


@pytest.mark.asyncio
async def test_cancels_every_membership_immediately(whop_client, fake_whop):
    assert await ban_user_from_company(whop_client, "user_scammer", COMPANY) is True
    assert fake_whop.cancelled == [("mem_1", "immediate"), ("mem_2", "immediate")]


@pytest.mark.asyncio
async def test_partial_failure_still_counts_as_banned(whop_client, fake_whop):
    fake_whop.failing_cancels.add("mem_1")

    assert await ban_user_from_company(whop_client, "user_scammer", COMPANY) is True
    assert fake_whop.cancelled_ids == ["mem_2"]


@pytest.mark.asyncio
async def test_every_cancel_failing_is_not_banned(whop_client, fake_whop):
    fake_whop.failing_cancels.update({"mem_1", "mem_2"})

    assert await ban_user_from_company(whop_client, "user_scammer", COMPANY) is False
    assert fake_whop.cancelled == []


@pytest.mark.asyncio
async def test_user_without_memberships(whop_client, fake_whop):
    assert await ban_user_from_company(whop_client, "user_admin", COMPANY) is True
    assert fake_whop.cancelled == []


@pytest.mark.asyncio
async def test_listing_failure(whop_client, fake_whop):
    fake_whop.failing.add("memberships")

    assert await ban_user_from_company(whop_client, "user_scammer", COMPANY) is False
    assert fake_whop.cancelled == []


@pytest.mark.asyncio
async def test_only_the_target_company_is_touched(whop_client, fake_whop):
    fake_whop.memberships["biz_456"] = [{"id": "mem_9", "user": {"id": "user_scammer"}}]

    await ban_user_from_company(whop_client, "user_scammer", COMPANY)

    assert "mem_9" not in fake_whop.cancelled_ids
