from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from scam_reports.models.base import Base


class ReportStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    denied = "denied"


def _new_report_id() -> str:
    return uuid.uuid4().hex


class Report(Base):
    __tablename__ = "reports"
    __table_args__ = (
        Index("ix_reports_company_created", "company_id", "created_at"),
        Index("ix_reports_company_reporter", "company_id", "reporter_user_id"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_report_id)
    reported_username: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # data: URLs from /upload can be large
    proof_image_url: Mapped[str] = mapped_column(Text, nullable=False)
    reporter_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    reporter_username: Mapped[str] = mapped_column(String(255), nullable=False)
    company_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    status: Mapped[ReportStatus] = mapped_column(
        SQLEnum(ReportStatus, name="report_status", native_enum=False, length=16),
        nullable=False,
        default=ReportStatus.pending,
        server_default=ReportStatus.pending.value,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
