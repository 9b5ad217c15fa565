from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from scam_reports.api.deps import get_authorization_resolver, get_optional_auth
from scam_reports.schemas.auth import RoleResponse
from scam_reports.services.authorization import AuthorizationResolver, Role
from scam_reports.services.identity import AuthContext

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get(
    "/role",
    response_model=RoleResponse,
    summary="Caller's role in the resolved company",
    description="Owner / admin (team member) / member, computed from Whop on every call.",
)
async def get_role(
    auth: AuthContext | None = Depends(get_optional_auth),
    authz: AuthorizationResolver = Depends(get_authorization_resolver),
):
    if auth is None:
        body = RoleResponse(role=Role.none, is_authorized=False)
        return JSONResponse(
            status_code=401,
            content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
    if not auth.company_id:
        return RoleResponse(role=Role.none, user_id=auth.user_id, company_id=None, is_authorized=False)

    role = await authz.resolve_role(auth.user_id, auth.company_id)
    # Every authenticated user of a company may use the app; role gates review
    return RoleResponse(
        role=role,
        user_id=auth.user_id,
        company_id=auth.company_id,
        is_authorized=True,
    )
