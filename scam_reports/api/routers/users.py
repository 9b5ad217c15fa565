from __future__ import annotations

from fastapi import APIRouter, Depends

from scam_reports.api.deps import get_user_lookup_service, require_auth
from scam_reports.core.exceptions import UnauthenticatedError
from scam_reports.schemas.common import ErrorResponse
from scam_reports.schemas.user import UserProfile
from scam_reports.services.identity import AuthContext
from scam_reports.services.users import UserLookupService

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/{username}",
    response_model=UserProfile,
    response_model_exclude_unset=True,
    summary="Profile and membership details for a username",
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_user(
    username: str,
    auth: AuthContext = Depends(require_auth),
    svc: UserLookupService = Depends(get_user_lookup_service),
):
    # Member details are only served inside a company context
    if not auth.company_id:
        raise UnauthenticatedError("Unauthorized")
    return await svc.lookup(username, auth.company_id)
