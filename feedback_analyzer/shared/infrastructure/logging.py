"""
Structured Logging
==================

JSON log lines for the analyzer. Every line carries a UTC timestamp, the
deployment environment and, while a request is being served, the request's
correlation ID. Credential-looking fields are masked before emission.

Usage:
    from feedback_analyzer.shared.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Summary computed", extra={"total_items": 16})
"""

import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator

from pythonjsonlogger import jsonlogger

REDACTED = "***REDACTED***"
SENSITIVE_KEY_FRAGMENTS = ("password", "api_key", "api_token", "authorization")

NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx")

# Set by CorrelationIDMiddleware for the lifetime of one request.
current_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return any(fragment in lowered for fragment in SENSITIVE_KEY_FRAGMENTS)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter adding timestamp, environment and correlation_id.

    An explicit ``correlation_id`` passed via ``extra`` wins over the
    request-scoped one.
    """

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()

        correlation_id = getattr(record, "correlation_id", None) or current_correlation_id.get()
        if correlation_id:
            log_record["correlation_id"] = correlation_id

        log_record.setdefault("environment", getattr(record, "environment", "unknown"))

        for key, value in list(log_record.items()):
            if isinstance(value, str) and _is_sensitive(key):
                log_record[key] = REDACTED


def setup_logging(level: str = "INFO", environment: str = "development") -> None:
    """
    Route all log output through one stdout handler emitting JSON.

    Args:
        level: Root level name (DEBUG, INFO, WARNING, ERROR)
        environment: Stamped on every line as ``environment``
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(
        CustomJsonFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
            static_fields={"environment": environment},
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; use ``__name__``."""
    return logging.getLogger(name)


def get_context_logger(name: str, correlation_id: str | None = None) -> logging.Logger:
    """
    Logger bound to a request's correlation ID.

    Without an ID the plain module logger is returned.
    """
    logger = get_logger(name)
    if correlation_id:
        logger = logging.LoggerAdapter(logger, {"correlation_id": correlation_id})
    return logger


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


@contextmanager
def log_latency(logger: logging.Logger, operation: str, **extra_context: Any) -> Iterator[None]:
    """
    Time the wrapped block and log it with latency_ms.

    Logs ``<operation> completed`` at INFO, or ``<operation> failed`` at
    WARNING with the error type when the block raises. The exception
    propagates either way.

    Usage:
        with log_latency(logger, "feedback_scan", source="database"):
            records = await repository.query_all()
    """
    started = time.perf_counter()
    try:
        yield
    except Exception as e:
        logger.warning(
            f"{operation} failed",
            extra={
                "operation": operation,
                "outcome": "error",
                "error_type": type(e).__name__,
                "latency_ms": _elapsed_ms(started),
                **extra_context,
            },
        )
        raise
    logger.info(
        f"{operation} completed",
        extra={
            "operation": operation,
            "outcome": "ok",
            "latency_ms": _elapsed_ms(started),
            **extra_context,
        },
    )
