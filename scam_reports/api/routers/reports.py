from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from scam_reports.api.deps import get_report_service, require_auth
from scam_reports.schemas.common import ErrorResponse
from scam_reports.schemas.report import (
    ReportCreateRequest,
    ReportEnvelope,
    ReportListResponse,
    ReportOut,
    ReportReviewRequest,
)
from scam_reports.services.identity import AuthContext
from scam_reports.services.reports import ReportService

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    },
)


@router.get(
    "",
    response_model=ReportListResponse,
    summary="All reports of a company (owners and team members)",
)
async def list_reports(
    company_id: str | None = Query(None),
    auth: AuthContext = Depends(require_auth),
    svc: ReportService = Depends(get_report_service),
):
    reports = await svc.list_for_company(auth, company_id)
    return ReportListResponse(reports=[ReportOut.model_validate(r) for r in reports])


@router.post("", response_model=ReportEnvelope, status_code=201, summary="Submit a scam report")
async def submit_report(
    payload: ReportCreateRequest,
    company_id: str | None = Query(None),
    auth: AuthContext = Depends(require_auth),
    svc: ReportService = Depends(get_report_service),
):
    report = await svc.submit(auth, payload, query_company_id=company_id)
    return ReportEnvelope(report=ReportOut.model_validate(report))


@router.get("/my", response_model=ReportListResponse, summary="Reports submitted by the caller")
async def list_my_reports(
    company_id: str | None = Query(None),
    auth: AuthContext = Depends(require_auth),
    svc: ReportService = Depends(get_report_service),
):
    reports = await svc.list_mine(auth, company_id)
    return ReportListResponse(reports=[ReportOut.model_validate(r) for r in reports])


@router.patch(
    "/{report_id}",
    response_model=ReportEnvelope,
    summary="Approve or deny a report",
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def review_report(
    report_id: str,
    payload: ReportReviewRequest,
    company_id: str | None = Query(None),
    auth: AuthContext = Depends(require_auth),
    svc: ReportService = Depends(get_report_service),
):
    report = await svc.review(auth, report_id, payload, query_company_id=company_id)
    return ReportEnvelope(report=ReportOut.model_validate(report))
