"""Owner / team-member classification backed by the Whop API.

Nothing is cached: every call asks Whop for the current company record and
authorized-user roster.
"""

from __future__ import annotations

import asyncio
from contextlib import aclosing
from enum import Enum

import structlog

from scam_reports.infra.whop import WhopAPIError, WhopClient

logger = structlog.get_logger(__name__)


class Role(str, Enum):
    owner = "owner"
    admin = "admin"
    member = "member"
    none = "none"


class AuthorizationResolver:
    def __init__(self, client: WhopClient) -> None:
        self._client = client

    async def is_company_owner(self, user_id: str, company_id: str) -> bool:
        try:
            company = await self._client.retrieve_company(company_id)
        except (WhopAPIError, ValueError) as exc:
            logger.error("company_owner_check_failed", company_id=company_id, error=str(exc))
            return False
        owner = company.get("owner_user") or {}
        return owner.get("id") == user_id

    async def get_authorized_user_role(self, user_id: str, company_id: str) -> str | None:
        """Return the user's role on the company's authorized-user roster, if listed."""
        try:
            async with aclosing(self._client.list_authorized_users(company_id)) as roster:
                async for authorized_user in roster:
                    user = authorized_user.get("user") or {}
                    if user.get("id") == user_id:
                        return authorized_user.get("role") or None
        except (WhopAPIError, ValueError) as exc:
            logger.error("authorized_user_check_failed", company_id=company_id, error=str(exc))
        return None

    async def is_team_member(self, user_id: str, company_id: str) -> bool:
        return await self.get_authorized_user_role(user_id, company_id) is not None

    async def _owner_and_roster_role(self, user_id: str, company_id: str) -> tuple[bool, str | None]:
        is_owner, roster_role = await asyncio.gather(
            self.is_company_owner(user_id, company_id),
            self.get_authorized_user_role(user_id, company_id),
        )
        return is_owner, roster_role

    async def resolve_role(self, user_id: str, company_id: str) -> Role:
        # owner > co-owner on roster > any other roster role > plain member
        is_owner, roster_role = await self._owner_and_roster_role(user_id, company_id)
        if is_owner or roster_role == "owner":
            return Role.owner
        if roster_role:
            return Role.admin
        return Role.member

    async def can_review(self, user_id: str, company_id: str) -> bool:
        is_owner, roster_role = await self._owner_and_roster_role(user_id, company_id)
        return is_owner or roster_role is not None
