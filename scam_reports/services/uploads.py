from __future__ import annotations

import base64

import structlog
from fastapi import UploadFile

from scam_reports.core.exceptions import ValidationError
from scam_reports.schemas.upload import UploadResponse

logger = structlog.get_logger(__name__)


async def store_proof_image(file: UploadFile | None, *, max_bytes: int) -> UploadResponse:
    """Validate an uploaded proof image and return it inlined as a data: URL."""
    if file is None:
        raise ValidationError("No file provided")

    content_type = (file.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise ValidationError("File must be an image")

    # Read one byte past the limit so oversized uploads are detected without
    # pulling the whole body into memory
    data = await file.read(max_bytes + 1)
    if len(data) > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise ValidationError(f"File size must be less than {limit_mb:g}MB")

    encoded = base64.b64encode(data).decode("ascii")
    logger.info("proof_image_stored", filename=file.filename, size=len(data))
    return UploadResponse(
        url=f"data:{content_type};base64,{encoded}",
        filename=file.filename,
        size=len(data),
        content_type=content_type,
    )
