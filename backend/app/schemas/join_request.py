from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.models.join_request import JoinRequestStatus
from app.schemas.common import UTCDateTime, strip_or_none


class JoinRequestCreate(BaseModel):
    message: str | None = Field(default=None, max_length=1000)

    @field_validator("message")
    @classmethod
    def normalize_message(cls, value: str | None) -> str | None:
        return strip_or_none(value)


class JoinRequestReview(BaseModel):
    status: JoinRequestStatus

    @field_validator("status")
    @classmethod
    def ensure_decision(cls, value: JoinRequestStatus) -> JoinRequestStatus:
        if value not in (JoinRequestStatus.APPROVED, JoinRequestStatus.REJECTED):
            raise ValueError("status must be APPROVED or REJECTED")
        return value


class JoinRequestRead(BaseModel):
    id: int
    project_id: int
    user_id: int
    user_first_name: str
    user_last_name: str
    user_profile_pic_url: str | None = None
    message: str | None = None
    status: JoinRequestStatus
    reviewed_at: UTCDateTime | None = None
    created_at: UTCDateTime


class MembershipStatusRead(BaseModel):
    status: Literal["OWNER", "MEMBER", "PENDING", "NONE"]
    interested: bool
