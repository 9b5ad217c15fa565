from __future__ import annotations

from datetime import datetime

from pydantic import Field

from scam_reports.models.report import ReportStatus
from scam_reports.schemas.common import CamelModel


class ReportCreateRequest(CamelModel):
    # Optional here so that a missing field is a 400 from the service, not a 422
    reported_username: str | None = Field(default=None, description="Username being reported")
    description: str | None = Field(default=None, description="What happened")
    proof_image_url: str | None = Field(default=None, description="URL of the proof image")
    company_id: str | None = Field(default=None, description="Overrides the resolved company")


class ReportReviewRequest(CamelModel):
    action: str | None = Field(default=None, description='"approve" or "deny"')
    company_id: str | None = Field(default=None, description="Overrides the resolved company")


class ReportOut(CamelModel):
    id: str
    reported_username: str
    description: str
    proof_image_url: str
    reporter_user_id: str
    reporter_username: str
    company_id: str
    status: ReportStatus
    created_at: datetime
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None


class ReportEnvelope(CamelModel):
    report: ReportOut


class ReportListResponse(CamelModel):
    reports: list[ReportOut]
