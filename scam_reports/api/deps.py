"""API dependency helpers and service providers."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from scam_reports.core.config import Settings
from scam_reports.core.exceptions import UnauthenticatedError
from scam_reports.db import get_async_session
from scam_reports.infra.whop import WhopClient
from scam_reports.services.authorization import AuthorizationResolver
from scam_reports.services.identity import AuthContext, IdentityVerifier
from scam_reports.services.reports import ReportService
from scam_reports.services.users import UserLookupService

__all__ = [
    "get_async_session",
    "get_settings",
    "get_whop_client",
    "get_identity_verifier",
    "get_optional_auth",
    "require_auth",
    "get_authorization_resolver",
    "get_report_service",
    "get_user_lookup_service",
]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_whop_client(request: Request) -> WhopClient:
    return request.app.state.whop


def get_identity_verifier(whop: WhopClient = Depends(get_whop_client)) -> IdentityVerifier:
    return IdentityVerifier(whop)


async def get_optional_auth(
    request: Request,
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> AuthContext | None:
    """Verified caller identity, or None when the token is missing/invalid."""
    return await verifier.verify(request.headers, str(request.url))


async def require_auth(auth: AuthContext | None = Depends(get_optional_auth)) -> AuthContext:
    if auth is None:
        raise UnauthenticatedError("Unauthorized")
    return auth


# --- Service providers for DI ---


def get_authorization_resolver(
    whop: WhopClient = Depends(get_whop_client),
) -> AuthorizationResolver:
    return AuthorizationResolver(whop)


def get_report_service(
    session: AsyncSession = Depends(get_async_session),
    whop: WhopClient = Depends(get_whop_client),
    authz: AuthorizationResolver = Depends(get_authorization_resolver),
) -> ReportService:
    return ReportService(session, whop, authz)


def get_user_lookup_service(whop: WhopClient = Depends(get_whop_client)) -> UserLookupService:
    return UserLookupService(whop)
