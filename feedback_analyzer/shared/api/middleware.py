"""
HTTP Middleware
===============

Request tracing and access logging for the analyzer API, plus the
catch-all handler that turns unexpected errors into a JSON 500.
"""

import time
import uuid
from typing import Any, Callable
from datetime import datetime, timezone

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from feedback_analyzer.config import settings
from feedback_analyzer.shared.infrastructure.logging import current_correlation_id, get_logger

CORRELATION_HEADER = "X-Correlation-ID"

logger = get_logger(__name__)


def _request_fields(request: Request) -> dict[str, Any]:
    return {
        "correlation_id": getattr(request.state, "correlation_id", "unknown"),
        "method": request.method,
        "path": request.url.path,
    }


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Reuses the caller's X-Correlation-ID or mints one, and echoes it back.

    The ID is kept on ``request.state`` and in the logging context so
    controllers and services log it without passing it around.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        token = current_correlation_id.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            current_correlation_id.reset(token)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log: one line when a request starts, one when it ends or fails."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        fields = _request_fields(request)
        started = time.perf_counter()
        logger.info("Request started", extra=fields)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    **fields,
                    "error": str(e),
                    "response_time_ms": int((time.perf_counter() - started) * 1000),
                },
            )
            raise

        elapsed = time.perf_counter() - started
        response.headers["X-Response-Time"] = f"{elapsed:.3f}s"
        logger.info(
            "Request completed",
            extra={
                **fields,
                "status_code": response.status_code,
                "response_time_ms": int(elapsed * 1000),
            },
        )
        return response


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last-resort handler for exceptions no route handled.

    The exception text is only echoed back in development.
    """
    fields = _request_fields(request)
    logger.error(
        "Unhandled exception",
        extra={**fields, "error_type": type(exc).__name__, "error_message": str(exc)},
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "correlation_id": fields["correlation_id"],
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "debug_info": str(exc) if settings.environment == "development" else None,
        },
    )
