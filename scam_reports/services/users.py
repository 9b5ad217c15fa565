from __future__ import annotations

from contextlib import aclosing
from typing import Any

import structlog

from scam_reports.core.exceptions import NotFoundError, UpstreamError
from scam_reports.infra.whop import WhopAPIError, WhopClient
from scam_reports.schemas.user import UserProfile
from scam_reports.services.reports import normalize_username

logger = structlog.get_logger(__name__)

MEMBER_SEARCH_LIMIT = 5


def _member_fields(member: dict[str, Any]) -> dict[str, Any]:
    return {
        "joined_at": member.get("joined_at"),
        "total_spent": member.get("usd_total_spent"),
        "member_status": member.get("status"),
        "access_level": member.get("access_level"),
    }


def _picture_url(user: dict[str, Any]) -> str | None:
    picture = user.get("profile_picture") or {}
    return picture.get("url") or None


class UserLookupService:
    """Profile + membership details for a username.

    The company's member roster is searched first since it carries email and
    membership context; the plain user record is the fallback.
    """

    def __init__(self, whop: WhopClient) -> None:
        self.whop = whop

    async def lookup(self, username: str, company_id: str | None) -> UserProfile:
        clean = normalize_username(username)
        if not clean:
            raise NotFoundError("User not found")

        if company_id:
            profile = await self._from_member_roster(clean, company_id)
            if profile is not None:
                return profile

        try:
            user = await self.whop.retrieve_user(clean)
        except WhopAPIError as exc:
            if exc.is_not_found:
                raise NotFoundError("User not found") from exc
            logger.error("user_lookup_failed", username=clean, error=str(exc))
            raise UpstreamError("user lookup failed") from exc

        fields: dict[str, Any] = {
            "id": user.get("id") or "",
            "username": user.get("username") or clean,
            "name": user.get("name"),
            "bio": user.get("bio"),
            "profile_picture": _picture_url(user),
            "created_at": user.get("created_at"),
            "email": None,
        }
        if company_id and fields["id"]:
            member = await self._member_by_user_id(fields["id"], company_id)
            if member is not None:
                fields["email"] = (member.get("user") or {}).get("email")
                fields.update(_member_fields(member))
        return UserProfile(**fields)

    async def _from_member_roster(self, username: str, company_id: str) -> UserProfile | None:
        member: dict[str, Any] | None = None
        try:
            async with aclosing(
                self.whop.list_members(company_id, query=username, first=MEMBER_SEARCH_LIMIT)
            ) as candidates:
                async for candidate in candidates:
                    member = candidate
                    break
        except (WhopAPIError, ValueError) as exc:
            logger.warning("member_search_failed", company_id=company_id, error=str(exc))
            return None
        if member is None:
            return None

        member_user = member.get("user") or {}
        fields: dict[str, Any] = {
            "id": member_user.get("id") or "",
            "username": member_user.get("username") or "",
            "name": member_user.get("name"),
            "bio": None,
            "profile_picture": None,
            "created_at": None,
            "email": member_user.get("email"),
        }
        fields.update(_member_fields(member))

        # bio / picture / created_at only come from the user record
        if fields["id"]:
            try:
                full_user = await self.whop.retrieve_user(fields["id"])
            except (WhopAPIError, ValueError) as exc:
                logger.info("member_user_enrich_failed", user_id=fields["id"], error=str(exc))
            else:
                fields["bio"] = full_user.get("bio")
                fields["profile_picture"] = _picture_url(full_user)
                fields["created_at"] = full_user.get("created_at")
        return UserProfile(**fields)

    async def _member_by_user_id(self, user_id: str, company_id: str) -> dict[str, Any] | None:
        try:
            async with aclosing(
                self.whop.list_members(company_id, user_ids=[user_id], first=MEMBER_SEARCH_LIMIT)
            ) as members:
                async for member in members:
                    if (member.get("user") or {}).get("id") == user_id:
                        return member
        except (WhopAPIError, ValueError) as exc:
            logger.info("member_details_unavailable", user_id=user_id, error=str(exc))
        return None
