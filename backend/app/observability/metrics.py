from __future__ import annotations

import time

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from sqlalchemy import event
from sqlalchemy.engine import Engine
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.config import get_settings

_settings = get_settings()
_NAMESPACE = _settings.metrics_namespace

_REQUEST_LABELS = ("method", "endpoint", "status")
_IN_PROGRESS_LABELS = ("method",)

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests handled by FastAPI",
    _REQUEST_LABELS,
    namespace=_NAMESPACE,
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "Latency for FastAPI HTTP requests",
    _REQUEST_LABELS,
    namespace=_NAMESPACE,
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30),
)
REQUEST_IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "Currently active FastAPI HTTP requests",
    _IN_PROGRESS_LABELS,
    namespace=_NAMESPACE,
)
DB_QUERY_DURATION = Histogram(
    "db_query_duration_seconds",
    "SQLAlchemy database query latency",
    ("operation",),
    namespace=_NAMESPACE,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5),
)
JOIN_REQUEST_TRANSITIONS = Counter(
    "join_request_transitions_total",
    "Join request state transitions partitioned by resulting status",
    ("status",),
    namespace=_NAMESPACE,
)
MEMBERSHIP_CHANGES = Counter(
    "membership_changes_total",
    "Project membership rows added or removed",
    ("change",),
    namespace=_NAMESPACE,
)
NOTIFICATION_RECORDED = Counter(
    "notification_recorded_total",
    "Count of in-app notifications recorded",
    ("type",),
    namespace=_NAMESPACE,
)
NOTIFICATION_FAILED = Counter(
    "notification_failed_total",
    "Count of notifications that could not be recorded",
    ("type",),
    namespace=_NAMESPACE,
)


def _metrics_enabled() -> bool:
    return get_settings().metrics_enabled


def _normalize_endpoint(path: str) -> str:
    candidate = path or "unknown"
    return candidate if len(candidate) <= 120 else f"{candidate[:117]}..."


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    return _normalize_endpoint(template) if template else "unmatched"


def _normalize_status(value: int | str) -> str:
    if isinstance(value, int):
        return str(value)
    candidate = str(value).strip()
    return candidate or "unknown"


def _normalize_label(value: str | None) -> str:
    if not value:
        return "unknown"
    sanitized = str(value).strip().lower()
    return sanitized[:64] if sanitized else "unknown"


def _classify_db_operation(statement: str) -> str:
    first = (statement or "").lstrip().split(" ", 1)[0].upper()
    if not first:
        return "OTHER"
    if first in {"SELECT", "INSERT", "UPDATE", "DELETE", "COMMIT", "ROLLBACK", "SAVEPOINT"}:
        return first
    return "OTHER"


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        settings = get_settings()
        if not settings.metrics_enabled or request.url.path.startswith("/metrics"):
            return await call_next(request)

        start = time.perf_counter()
        method = request.method.upper()
        in_progress_labels = {"method": method}

        REQUEST_IN_PROGRESS.labels(**in_progress_labels).inc()
        status_label = "500"
        try:
            response = await call_next(request)
            status_label = _normalize_status(response.status_code)
            return response
        finally:
            duration = time.perf_counter() - start
            # The router sets scope["route"] while handling the request.
            labels = {"method": method, "endpoint": _route_template(request), "status": status_label}
            REQUEST_COUNT.labels(**labels).inc()
            REQUEST_LATENCY.labels(**labels).observe(duration)
            REQUEST_IN_PROGRESS.labels(**in_progress_labels).dec()


def record_join_request_transition(status: str) -> None:
    if not _metrics_enabled():
        return
    JOIN_REQUEST_TRANSITIONS.labels(status=_normalize_label(status)).inc()


def record_membership_change(change: str) -> None:
    if not _metrics_enabled():
        return
    MEMBERSHIP_CHANGES.labels(change=_normalize_label(change)).inc()


def record_notification_recorded(notification_type: str | None) -> None:
    if not _metrics_enabled():
        return
    NOTIFICATION_RECORDED.labels(type=_normalize_label(notification_type)).inc()


def record_notification_failed(notification_type: str | None) -> None:
    if not _metrics_enabled():
        return
    NOTIFICATION_FAILED.labels(type=_normalize_label(notification_type)).inc()


def instrument_engine(engine: Engine) -> None:
    if getattr(engine, "_metrics_instrumented", False):
        return

    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):  # type: ignore[override]
        if not _metrics_enabled():
            return
        stack = conn.info.setdefault("_metrics_query_start", [])
        stack.append((time.perf_counter(), _classify_db_operation(statement)))

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):  # type: ignore[override]
        if not _metrics_enabled():
            conn.info.pop("_metrics_query_start", None)
            return
        stack = conn.info.get("_metrics_query_start")
        if not stack:
            return
        start, operation = stack.pop()
        duration = time.perf_counter() - start
        DB_QUERY_DURATION.labels(operation=operation).observe(max(duration, 0.0))

    engine._metrics_instrumented = True  # type: ignore[attr-defined]


def metrics_response() -> Response:
    payload = generate_latest()
    return Response(payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "MetricsMiddleware",
    "instrument_engine",
    "metrics_response",
    "record_join_request_transition",
    "record_membership_change",
    "record_notification_failed",
    "record_notification_recorded",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "REQUEST_IN_PROGRESS",
    "DB_QUERY_DURATION",
    "JOIN_REQUEST_TRANSITIONS",
    "MEMBERSHIP_CHANGES",
    "NOTIFICATION_RECORDED",
    "NOTIFICATION_FAILED",
]
