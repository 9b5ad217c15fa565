from __future__ import annotations

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scam_reports.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from scam_reports.infra.whop import WhopAPIError, WhopClient
from scam_reports.models.report import Report, ReportStatus
from scam_reports.repositories.report_repository import ReportRepository
from scam_reports.schemas.report import ReportCreateRequest, ReportReviewRequest
from scam_reports.services.authorization import AuthorizationResolver
from scam_reports.services.enforcement import ban_user_from_company
from scam_reports.services.identity import AuthContext

logger = structlog.get_logger(__name__)

UNKNOWN_REPORTER = "Unknown"
REVIEW_ACTIONS = {"approve": ReportStatus.approved, "deny": ReportStatus.denied}


def _first_present(*candidates: str | None) -> str | None:
    for value in candidates:
        if value:
            return value
    return None


def normalize_username(username: str) -> str:
    return username.strip().removeprefix("@")


class ReportService:
    def __init__(
        self,
        session: AsyncSession,
        whop: WhopClient,
        authz: AuthorizationResolver,
    ) -> None:
        self.repo = ReportRepository(session)
        self.session = session
        self.whop = whop
        self.authz = authz

    async def submit(
        self,
        auth: AuthContext,
        payload: ReportCreateRequest,
        *,
        query_company_id: str | None = None,
    ) -> Report:
        company_id = _first_present(payload.company_id, auth.company_id, query_company_id)
        required = {
            "reportedUsername": payload.reported_username,
            "description": payload.description,
            "proofImageUrl": payload.proof_image_url,
            "companyId": company_id,
        }
        missing = [name for name, value in required.items() if not (value and value.strip())]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        reporter_username = await self._reporter_username(auth.user_id)
        try:
            report = await self.repo.create(
                reported_username=payload.reported_username.strip(),
                description=payload.description,
                proof_image_url=payload.proof_image_url,
                reporter_user_id=auth.user_id,
                reporter_username=reporter_username,
                company_id=company_id,
            )
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.exception("report_store_failed", op="create")
            raise UpstreamError("could not store report") from exc

        logger.info(
            "report_submitted",
            report_id=report.id,
            company_id=company_id,
            reporter_user_id=auth.user_id,
        )
        return report

    async def list_for_company(self, auth: AuthContext, company_id: str | None) -> list[Report]:
        company_id = _first_present(company_id, auth.company_id)
        if not company_id:
            raise ValidationError("company_id is required")
        if not await self.authz.can_review(auth.user_id, company_id):
            raise ForbiddenError("Forbidden: Owners and team members only")
        return await self._read(self.repo.list_by_company(company_id))

    async def list_mine(self, auth: AuthContext, company_id: str | None) -> list[Report]:
        company_id = _first_present(company_id, auth.company_id)
        if not company_id:
            raise ValidationError("company_id is required")
        return await self._read(self.repo.list_by_reporter(auth.user_id, company_id))

    async def review(
        self,
        auth: AuthContext,
        report_id: str,
        payload: ReportReviewRequest,
        *,
        query_company_id: str | None = None,
    ) -> Report:
        """Approve or deny a pending report.

        The guarded transition is committed first. Only then does an approval
        ban the reported user, on a best-effort basis: lookup and cancellation
        failures are logged and never undo the stored decision.
        """
        company_id = _first_present(payload.company_id, auth.company_id, query_company_id)
        if not payload.action or not company_id:
            raise ValidationError("Missing required fields: action, companyId")
        status = REVIEW_ACTIONS.get(payload.action)
        if status is None:
            raise ValidationError('Invalid action. Must be "approve" or "deny"')

        if not await self.authz.can_review(auth.user_id, company_id):
            raise ForbiddenError("Forbidden: Owners and team members only")

        report = await self._read(self.repo.get_by_id(report_id, company_id))
        if report is None:
            raise NotFoundError("Report not found")
        if report.status is not ReportStatus.pending:
            raise ConflictError(f"Report already {report.status.value}")

        try:
            updated = await self.repo.update_status(report_id, company_id, status, auth.user_id)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.exception("report_store_failed", op="update_status", report_id=report_id)
            raise UpstreamError("could not update report") from exc
        if updated is None:
            # Lost the race against another reviewer between the read and the update
            raise ConflictError("Report already reviewed")

        logger.info(
            "report_reviewed",
            report_id=report_id,
            company_id=company_id,
            status=status.value,
            reviewed_by=auth.user_id,
        )
        # Only the reviewer whose transition was stored enforces it
        if status is ReportStatus.approved:
            await self._ban_reported_user(updated)
        return updated

    async def _ban_reported_user(self, report: Report) -> None:
        username = normalize_username(report.reported_username)
        try:
            reported_user = await self.whop.retrieve_user(username)
        except (WhopAPIError, ValueError) as exc:
            logger.warning(
                "ban_skipped",
                report_id=report.id,
                reported_username=username,
                reason="user_lookup_failed",
                error=str(exc),
            )
            return
        resolved_username = reported_user.get("username") or ""
        if resolved_username.casefold() != username.casefold():
            logger.warning(
                "ban_skipped",
                report_id=report.id,
                reported_username=username,
                resolved_username=resolved_username,
                reason="username_mismatch",
            )
            return
        reported_user_id = reported_user.get("id")
        if not reported_user_id:
            logger.warning("ban_skipped", report_id=report.id, reason="user_has_no_id")
            return
        banned = await ban_user_from_company(self.whop, reported_user_id, report.company_id)
        if not banned:
            logger.warning("ban_incomplete", report_id=report.id, reported_user_id=reported_user_id)

    async def _reporter_username(self, user_id: str) -> str:
        try:
            user = await self.whop.retrieve_user(user_id)
        except (WhopAPIError, ValueError) as exc:
            logger.warning("reporter_lookup_failed", user_id=user_id, error=str(exc))
            return UNKNOWN_REPORTER
        return user.get("username") or UNKNOWN_REPORTER

    async def _read(self, query):
        try:
            return await query
        except SQLAlchemyError as exc:
            logger.exception("report_store_failed", op="read")
            raise UpstreamError("database unavailable") from exc
