from __future__ import annotations

import structlog

from scam_reports.infra.whop import WhopAPIError, WhopClient

logger = structlog.get_logger(__name__)


async def ban_user_from_company(client: WhopClient, user_id: str, company_id: str) -> bool:
    """Cancel every membership ``user_id`` holds in ``company_id``, immediately.

    Returns True when at least one membership was cancelled or the user had
    none, False when listing failed or every cancellation failed.
    """
    found = 0
    cancelled = 0
    try:
        async for membership in client.list_memberships(company_id, user_ids=[user_id]):
            found += 1
            membership_id = membership.get("id")
            if not membership_id:
                continue
            try:
                await client.cancel_membership(membership_id, cancellation_mode="immediate")
            except WhopAPIError as exc:
                logger.error(
                    "membership_cancel_failed",
                    membership_id=membership_id,
                    user_id=user_id,
                    status_code=exc.status_code,
                )
                continue
            cancelled += 1
    except (WhopAPIError, ValueError) as exc:
        logger.error("membership_list_failed", user_id=user_id, company_id=company_id, error=str(exc))
        return False

    logger.info(
        "user_banned",
        user_id=user_id,
        company_id=company_id,
        memberships=found,
        cancelled=cancelled,
    )
    return found == 0 or cancelled > 0
