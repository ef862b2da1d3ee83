from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Annotated, Any, Sequence

from pydantic import AfterValidator, BaseModel, ConfigDict


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UTCDateTime = Annotated[datetime, AfterValidator(_ensure_utc)]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class IdentifierModel(ORMModel):
    id: int
    created_at: UTCDateTime


class Pagination(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int


def paginated(items: Sequence[Any], *, page: int, page_size: int, total: int) -> dict[str, Any]:
    return {
        "items": list(items),
        "pagination": Pagination(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=math.ceil(total / page_size) if page_size else 0,
        ).model_dump(),
    }


def strip_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    candidate = value.strip()
    return candidate or None
