"""Thin async client for the Whop REST API and Whop user tokens."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any
from urllib.parse import quote

import httpx
import jwt

from scam_reports.core.config import Settings

DEFAULT_PAGE_SIZE = 50
TOKEN_ALGORITHMS = ["ES256"]


class WhopAPIError(Exception):
    """A Whop API call failed. ``status_code`` is None for transport errors."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class WhopTokenError(Exception):
    """The x-whop-user-token could not be verified."""


def _segment(value: str) -> str:
    """Percent-encode one path parameter so it can never add or climb path segments."""
    if value in {"", ".", ".."}:
        raise WhopAPIError(f"invalid resource id: {value!r}", status_code=404)
    return quote(value, safe="")


class WhopClient:
    """Created once per process and shared by every request.

    Pass ``transport`` to route calls somewhere other than the network
    (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        app_id: str | None,
        base_url: str,
        token_public_key: str | None = None,
        token_issuer: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.app_id = app_id
        self._api_key = api_key
        self._token_public_key = token_public_key
        self._token_issuer = token_issuer
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> WhopClient:
        return cls(
            api_key=settings.whop_api_key,
            app_id=settings.whop_app_id,
            base_url=settings.whop_api_base_url,
            token_public_key=settings.whop_token_public_key,
            token_issuer=settings.whop_token_issuer,
            timeout=settings.whop_timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    # --- user tokens ---

    def verify_user_token(self, token: str) -> str:
        """Return the user id carried by a Whop user token.

        Raises WhopTokenError when the token is malformed, expired, signed by
        another key or issued for another app.
        """
        if not self._token_public_key:
            raise WhopTokenError("WHOP_TOKEN_PUBLIC_KEY is not configured")
        if not self.app_id:
            raise WhopTokenError("WHOP_APP_ID is not configured")
        try:
            payload = jwt.decode(
                token,
                self._token_public_key,
                algorithms=TOKEN_ALGORITHMS,
                audience=self.app_id,
                issuer=self._token_issuer,
                options={"require": ["sub", "aud"]},
            )
        except jwt.InvalidTokenError as exc:
            raise WhopTokenError(str(exc)) from exc
        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise WhopTokenError("token has no user id")
        return user_id

    # --- transport helpers ---

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if not self._api_key:
            raise WhopAPIError("WHOP_API_KEY is not set")
        try:
            response = await self._http.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            raise WhopAPIError(f"{method} {path} failed: {exc}") from exc
        if response.status_code >= 400:
            raise WhopAPIError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            return {}
        return response.json()

    async def _paginate(
        self, path: str, params: list[tuple[str, Any]]
    ) -> AsyncIterator[dict[str, Any]]:
        """Follow ``page_info.end_cursor`` until ``has_next_page`` is false."""
        cursor: str | None = None
        while True:
            page_params = list(params)
            if cursor:
                page_params.append(("after", cursor))
            page = await self._request("GET", path, params=page_params)
            for item in page.get("data") or []:
                yield item
            page_info = page.get("page_info") or {}
            cursor = page_info.get("end_cursor")
            if not page_info.get("has_next_page") or not cursor:
                return

    # --- resources ---

    async def retrieve_company(self, company_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/companies/{_segment(company_id)}")

    async def retrieve_experience(self, experience_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/experiences/{_segment(experience_id)}")

    async def retrieve_user(self, id_or_username: str) -> dict[str, Any]:
        return await self._request("GET", f"/users/{_segment(id_or_username)}")

    def list_authorized_users(self, company_id: str) -> AsyncIterator[dict[str, Any]]:
        return self._paginate(
            "/authorized_users",
            [("company_id", company_id), ("first", DEFAULT_PAGE_SIZE)],
        )

    def list_members(
        self,
        company_id: str,
        *,
        query: str | None = None,
        user_ids: list[str] | None = None,
        first: int = DEFAULT_PAGE_SIZE,
    ) -> AsyncIterator[dict[str, Any]]:
        params: list[tuple[str, Any]] = [("company_id", company_id), ("first", first)]
        if query:
            params.append(("query", query))
        for user_id in user_ids or []:
            params.append(("user_ids[]", user_id))
        return self._paginate("/members", params)

    def list_memberships(
        self, company_id: str, *, user_ids: list[str]
    ) -> AsyncIterator[dict[str, Any]]:
        params: list[tuple[str, Any]] = [("company_id", company_id), ("first", DEFAULT_PAGE_SIZE)]
        params.extend(("user_ids[]", user_id) for user_id in user_ids)
        return self._paginate("/memberships", params)

    async def cancel_membership(
        self, membership_id: str, *, cancellation_mode: str = "immediate"
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/memberships/{_segment(membership_id)}/cancel",
            json={"cancellation_mode": cancellation_mode},
        )
