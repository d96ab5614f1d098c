"""Error envelope and exception handlers.

Every failure leaves the API as the same JSON envelope:

    {"error_code": ..., "message": ..., "details": ..., "request_id": ...}

Domain failures are raised as AppError subclasses (see app_exceptions);
anything else is reported as INTERNAL_ERROR.
"""

import uuid
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException

from app.core.app_exceptions import AppError
from app.core.config import settings
from app.core.logging import get_logger, request_id_var

logger = get_logger(__name__)


class ErrorResponse(BaseModel):
    """Stable error envelope returned for every non-2xx response."""

    error_code: str
    message: str
    details: Any | None = None
    request_id: str | None = None


def get_request_id(request: Request) -> str:
    """Request id set by the middleware, falling back to a fresh one."""
    request_id = getattr(request.state, "request_id", None) or request_id_var.get()
    return request_id or str(uuid.uuid4())


def _envelope(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        details=details,
        request_id=get_request_id(request),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies, query params and path params (422)."""
    details = [
        {
            "field": ".".join(str(loc) for loc in error.get("loc", [])),
            "issue": error.get("msg", "Validation error"),
            "type": error.get("type", "validation_error"),
        }
        for error in exc.errors()
    ]
    return _envelope(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Invalid request data",
        details,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Domain errors keep their code; plain HTTPExceptions become HTTP_ERROR."""
    if isinstance(exc, AppError):
        logger.info(
            "app_error",
            extra={"error_code": exc.code, "status_code": exc.status_code},
        )
        return _envelope(request, exc.status_code, exc.code, exc.message, exc.details)

    # Starlette raises these for unknown routes and wrong methods
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _envelope(request, exc.status_code, "HTTP_ERROR", message)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected (500). Internals stay hidden in prod."""
    logger.error("unhandled_exception", extra={"error": str(exc)}, exc_info=exc)

    if settings.ENV == "prod":
        return _envelope(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR",
            "An internal server error occurred",
        )
    return _envelope(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        str(exc),
        {"type": type(exc).__name__},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
