from __future__ import annotations

import re
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from scam_reports.models.report import Report, ReportStatus

_REPORT_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_report_id(report_id: str) -> bool:
    return bool(_REPORT_ID_RE.match(report_id or ""))


class ReportRepository:
    """Report persistence. Every query is scoped by company id."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        reported_username: str,
        description: str,
        proof_image_url: str,
        reporter_user_id: str,
        reporter_username: str,
        company_id: str,
        created_at: datetime | None = None,
    ) -> Report:
        r = Report(
            reported_username=reported_username,
            description=description,
            proof_image_url=proof_image_url,
            reporter_user_id=reporter_user_id,
            reporter_username=reporter_username,
            company_id=company_id,
            status=ReportStatus.pending,
            created_at=created_at or _utcnow(),
        )
        self._session.add(r)
        await self._session.flush()
        return r

    async def list_by_company(self, company_id: str) -> list[Report]:
        stmt = (
            select(Report)
            .where(Report.company_id == company_id)
            .order_by(Report.created_at.desc(), Report.id.desc())
        )
        return list((await self._session.scalars(stmt)).all())

    async def list_by_reporter(self, user_id: str, company_id: str) -> list[Report]:
        stmt = (
            select(Report)
            .where(Report.company_id == company_id, Report.reporter_user_id == user_id)
            .order_by(Report.created_at.desc(), Report.id.desc())
        )
        return list((await self._session.scalars(stmt)).all())

    async def get_by_id(self, report_id: str, company_id: str) -> Report | None:
        if not is_valid_report_id(report_id):
            return None
        stmt = (
            select(Report)
            .where(Report.id == report_id, Report.company_id == company_id)
            .execution_options(populate_existing=True)
        )
        return (await self._session.scalars(stmt)).first()

    async def update_status(
        self,
        report_id: str,
        company_id: str,
        status: ReportStatus,
        reviewer_id: str,
        *,
        only_pending: bool = True,
    ) -> Report | None:
        """Apply a review decision in a single UPDATE.

        With ``only_pending`` the row must still be pending, so two concurrent
        reviewers cannot both win. Returns None when nothing matched.
        """
        if status not in (ReportStatus.approved, ReportStatus.denied):
            raise ValueError(f"invalid review status: {status!r}")
        if not is_valid_report_id(report_id):
            return None

        stmt = update(Report).where(Report.id == report_id, Report.company_id == company_id)
        if only_pending:
            stmt = stmt.where(Report.status == ReportStatus.pending)
        stmt = stmt.values(status=status, reviewed_at=_utcnow(), reviewed_by=reviewer_id)
        result = await self._session.execute(stmt.execution_options(synchronize_session=False))
        if not result.rowcount:
            return None
        return await self.get_by_id(report_id, company_id)
