import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from scam_reports.db import Database, get_database
from scam_reports.schemas.common import OkResponse

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=OkResponse, summary="Liveness probe")
async def healthz():
    return {"ok": True}


@router.get(
    "/readyz",
    response_model=OkResponse,
    summary="Readiness probe",
    description="Runs SELECT 1 against the report database",
)
async def readyz(database: Database = Depends(get_database)):
    try:
        await database.ping()
    except SQLAlchemyError as exc:
        logger.warning("readiness_check_failed", error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": {"code": "database_unavailable", "message": "Database is not reachable"}},
        )
    return {"ok": True}
