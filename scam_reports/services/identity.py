"""Resolve the calling Whop user and company from request headers/URL."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import parse_qs, urlsplit

import structlog

from scam_reports.infra.whop import WhopAPIError, WhopClient, WhopTokenError

logger = structlog.get_logger(__name__)

USER_TOKEN_HEADER = "x-whop-user-token"
COMPANY_HEADER = "x-whop-company-id"
EXPERIENCE_HEADERS = (
    "x-whop-experience-id",
    "whop-experience-id",
    "x-experience-id",
    "experience-id",
)


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    company_id: str | None = None


def _query_param(url: str | None, name: str) -> str | None:
    if not url:
        return None
    try:
        values = parse_qs(urlsplit(url).query).get(name)
    except ValueError:
        return None
    if not values:
        return None
    return values[0] or None


class IdentityVerifier:
    def __init__(self, client: WhopClient) -> None:
        self._client = client

    async def verify(self, headers: Mapping[str, str], url: str | None = None) -> AuthContext | None:
        """Return the caller's identity, or None when unauthenticated.

        A missing company id is not an authentication failure; callers decide
        whether they need one.
        """
        token = headers.get(USER_TOKEN_HEADER)
        if not token or not self._client.app_id:
            return None
        try:
            user_id = self._client.verify_user_token(token)
        except WhopTokenError as exc:
            logger.info("user_token_rejected", reason=str(exc))
            return None

        company_id = headers.get(COMPANY_HEADER) or await self.resolve_company_id(headers, url)
        return AuthContext(user_id=user_id, company_id=company_id)

    async def resolve_company_id(self, headers: Mapping[str, str], url: str | None) -> str | None:
        experience_id = next((headers[h] for h in EXPERIENCE_HEADERS if headers.get(h)), None)
        if not experience_id:
            experience_id = _query_param(url, "experience")
        if not experience_id:
            return _query_param(url, "company_id")

        try:
            experience = await self._client.retrieve_experience(experience_id)
        except (WhopAPIError, ValueError) as exc:
            logger.warning("experience_lookup_failed", experience_id=experience_id, error=str(exc))
            return None
        company = experience.get("company") or {}
        return company.get("id") or None
