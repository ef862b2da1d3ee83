from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ResponseEnvelope(BaseModel):
    status: str = Field(default="success")
    code: str = Field(default="SUCCESS")
    message: str | None = Field(default="Success")
    data: Any | None = None
    timestamp: str = Field(default_factory=_utc_timestamp)


def success_response(data: Any | None = None, message: str = "Success", code: str = "SUCCESS") -> dict[str, Any | None]:
    return {
        "status": "success",
        "code": code,
        "message": message,
        "data": data,
        "timestamp": _utc_timestamp(),
    }


def error_response(detail: dict[str, Any | None]) -> dict[str, Any | None]:
    return {
        "status": "error",
        "code": detail.get("code"),
        "message": detail.get("message"),
        "data": detail.get("data"),
        "timestamp": _utc_timestamp(),
    }
