import time
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.response import ResponseEnvelope, success_response
from app.core.config import get_settings
from app.db.session import get_db
from app.logging import get_logger
from app.observability.metrics import metrics_response

router = APIRouter(tags=["health"])
liveness_router = APIRouter(tags=["health"])
metrics_router = APIRouter(tags=["metrics"])
logger = get_logger()


@liveness_router.get("/health", summary="Liveness probe", response_model=ResponseEnvelope)
def health() -> dict:
    settings = get_settings()
    return success_response({"status": "ok", "version": settings.app_version}, message="Service is running")


@router.get("/readyz", summary="Readiness probe", response_model=ResponseEnvelope)
def readyz(db: Session = Depends(get_db)) -> JSONResponse:
    checks: dict[str, dict[str, Any]] = {}
    overall_ok = True

    db_check: dict[str, Any] = {"status": "ok"}
    db_start = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
        db_check["latency_ms"] = int((time.perf_counter() - db_start) * 1000)
    except SQLAlchemyError as exc:
        logger.warning("readiness_database_failed", error=str(exc))
        db_check["status"] = "error"
        db_check["error"] = str(exc)
        overall_ok = False
    checks["database"] = db_check

    payload = {
        "status": "ready" if overall_ok else "degraded",
        "checks": checks,
    }
    status_code = status.HTTP_200_OK if overall_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=success_response(payload))


@metrics_router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    """Prometheus scrape target, mounted only when metrics are enabled."""
    return metrics_response()
