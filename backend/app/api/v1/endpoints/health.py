"""Health and readiness endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import get_request_id
from app.db.session import get_db

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok"] = "ok"


class ReadinessCheck(BaseModel):
    """Individual readiness check result."""

    status: Literal["ok", "down"]
    message: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: Literal["ok", "down"]
    checks: dict[str, ReadinessCheck]
    request_id: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health_check() -> HealthResponse:
    """Process liveness only."""
    return HealthResponse(status="ok")


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Verifies database connectivity and that the curriculum is loaded.",
)
def readiness_check(
    request: Request,
    db: Session = Depends(get_db),
) -> ReadinessResponse:
    checks: dict[str, ReadinessCheck] = {}

    try:
        db.execute(text("SELECT 1"))
        checks["db"] = ReadinessCheck(status="ok")
    except Exception as e:
        checks["db"] = ReadinessCheck(status="down", message=str(e))

    state = getattr(request.app.state, "learnsmart", None)
    if state is not None and state.curriculum.get_classes():
        checks["curriculum"] = ReadinessCheck(status="ok")
    else:
        checks["curriculum"] = ReadinessCheck(status="down", message="Curriculum not loaded")

    overall: Literal["ok", "down"] = (
        "ok" if all(check.status == "ok" for check in checks.values()) else "down"
    )
    return ReadinessResponse(status=overall, checks=checks, request_id=get_request_id(request))
