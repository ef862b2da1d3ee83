"""Structured JSON logging for the CollabHub API.

Every line carries the service name and environment, plus whatever request
context ``RequestIdMiddleware`` and the auth dependency bound for the current
request (``request_id``, ``path``, ``method``, ``user_id``).
"""

import logging
import sys
import time
from typing import Any, Awaitable, Callable
from uuid import uuid4

import structlog
from structlog import contextvars
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.config import get_settings

SERVICE_NAME = "collabhub-api"
REQUEST_ID_HEADER = "X-Request-ID"
MAX_LOG_VALUE_LENGTH = 2048
TRUNCATION_SUFFIX = "...(truncated)"
_MAX_MASK_DEPTH = 4
_QUIET_PATHS = ("/api/v1/health", "/api/readyz", "/metrics")


def _truncate(value: str) -> str:
    if len(value) <= MAX_LOG_VALUE_LENGTH:
        return value
    return f"{value[:MAX_LOG_VALUE_LENGTH]}{TRUNCATION_SUFFIX}"


def _truncate_large_values(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key, value in list(event_dict.items()):
        if isinstance(value, str):
            event_dict[key] = _truncate(value)
        elif isinstance(value, list):
            event_dict[key] = [_truncate(item) if isinstance(item, str) else item for item in value]
    return event_dict


def _mask_sensitive_values(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    settings = get_settings()
    redacted_keys = {entry.lower() for entry in settings.redact_fields}
    placeholder = settings.redaction_placeholder

    def _mask(value: Any, depth: int = 0) -> Any:
        if depth > _MAX_MASK_DEPTH:
            return value
        if isinstance(value, dict):
            for key, item in list(value.items()):
                if isinstance(key, str) and key.lower() in redacted_keys:
                    value[key] = placeholder
                else:
                    value[key] = _mask(item, depth + 1)
            return value
        if isinstance(value, (list, tuple)):
            return type(value)(_mask(item, depth + 1) for item in value)
        return value

    return _mask(event_dict)


def _add_service_context(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("environment", get_settings().app_env)
    return event_dict


def configure_logging() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        handlers=[logging.StreamHandler(sys.stdout)],
        format="%(message)s",
    )
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).handlers = []

    structlog.configure(
        processors=[
            contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_service_context,
            _mask_sensitive_values,
            _truncate_large_values,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def bind_log_context(**params: Any) -> None:
    payload = {key: str(value) for key, value in params.items() if value is not None}
    if payload:
        contextvars.bind_contextvars(**payload)


def unbind_log_context(*keys: str) -> None:
    contextvars.unbind_contextvars(*keys)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Binds per-request log context and logs one ``request_completed`` line."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:  # type: ignore[override]
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        path = request.url.path

        contextvars.clear_contextvars()
        bind_log_context(request_id=request_id, path=path, method=request.method)

        start = time.perf_counter()
        try:
            response = await call_next(request)
            if not path.startswith(_QUIET_PATHS):
                get_logger().info(
                    "request_completed",
                    status_code=response.status_code,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )
        finally:
            unbind_log_context("user_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def get_logger(name: str | None = None, **initial_values: Any) -> structlog.stdlib.BoundLogger:
    if name is not None:
        return structlog.get_logger(name, **initial_values)
    return structlog.get_logger(**initial_values)


__all__ = [
    "REQUEST_ID_HEADER",
    "RequestIdMiddleware",
    "bind_log_context",
    "configure_logging",
    "get_logger",
    "unbind_log_context",
]
