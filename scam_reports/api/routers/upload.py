from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile

from scam_reports.api.deps import get_settings, require_auth
from scam_reports.core.config import Settings
from scam_reports.schemas.upload import UploadResponse
from scam_reports.services.identity import AuthContext
from scam_reports.services.uploads import store_proof_image

router = APIRouter(tags=["upload"])


@router.post("/upload", response_model=UploadResponse, summary="Upload a proof image")
async def upload_proof(
    file: UploadFile | None = File(None),
    _auth: AuthContext = Depends(require_auth),
    settings: Settings = Depends(get_settings),
):
    return await store_proof_image(file, max_bytes=settings.upload_max_bytes)
