from __future__ import annotations

from scam_reports.schemas.common import CamelModel


class UploadResponse(CamelModel):
    url: str
    filename: str | None
    size: int
    content_type: str
