"""Request ID middleware: tags every request and logs its latency."""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import get_logger, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuses the client's X-Request-ID or generates one, and echoes it back."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        log_context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }

        token = request_id_var.set(request_id)
        start = time.perf_counter()
        logger.info("request_started", extra=log_context)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                extra={
                    **log_context,
                    "status_code": 500,
                    "latency_ms": int((time.perf_counter() - start) * 1000),
                    "error": str(e),
                },
                exc_info=True,
            )
            raise
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "request_completed",
            extra={
                **log_context,
                "status_code": response.status_code,
                "latency_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return response
