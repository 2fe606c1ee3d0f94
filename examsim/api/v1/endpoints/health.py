"""Health and readiness endpoints."""

from typing import Literal

from fastapi import APIRouter, Request, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from examsim.core.dependencies import DbSession
from examsim.core.errors import get_request_id
from examsim.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok"] = "ok"


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: Literal["ok", "down"]
    checks: dict[str, str]
    request_id: str


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check() -> HealthResponse:
    """Process is alive."""
    return HealthResponse(status="ok")


@router.get("/ready", response_model=ReadinessResponse, status_code=status.HTTP_200_OK)
async def readiness_check(request: Request, db: DbSession) -> ReadinessResponse:
    """Database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        db_status = "down"

    return ReadinessResponse(
        status="ok" if db_status == "ok" else "down",
        checks={"db": db_status},
        request_id=get_request_id(request),
    )
