from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Integer, Text, UniqueConstraint, and_, func, select
from sqlalchemy.sql.expression import Subquery
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, CreatedAtMixin, IntegerPrimaryKeyMixin

if TYPE_CHECKING:
    from app.models.project import Project
    from app.models.user import User

OPENED_SEQUENCE = 0
DECISION_SEQUENCE = 1


class JoinRequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not JoinRequestStatus.PENDING


class JoinRequest(IntegerPrimaryKeyMixin, CreatedAtMixin, Base):
    """One application by a user to join a project.

    The row itself never changes after insert. Its lifecycle lives in
    ``join_request_events``: a PENDING event at sequence 0 and at most one
    terminal event at sequence 1.
    """

    __tablename__ = "join_requests"

    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    message: Mapped[str | None] = mapped_column(Text, nullable=True)

    project: Mapped["Project"] = relationship("Project", back_populates="join_requests")
    user: Mapped["User"] = relationship("User")
    events: Mapped[list["JoinRequestEvent"]] = relationship(
        "JoinRequestEvent",
        back_populates="join_request",
        cascade="all, delete-orphan",
        order_by="JoinRequestEvent.sequence",
        lazy="selectin",
    )

    @property
    def latest_event(self) -> "JoinRequestEvent | None":
        return self.events[-1] if self.events else None

    @property
    def status(self) -> JoinRequestStatus:
        latest = self.latest_event
        return latest.status if latest is not None else JoinRequestStatus.PENDING

    @property
    def reviewed_at(self) -> datetime | None:
        latest = self.latest_event
        if latest is None or not latest.status.is_terminal:
            return None
        return latest.created_at


class JoinRequestEvent(IntegerPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "join_request_events"
    __table_args__ = (
        UniqueConstraint("join_request_id", "sequence", name="uq_join_request_events_request_sequence"),
    )

    join_request_id: Mapped[int] = mapped_column(
        ForeignKey("join_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[JoinRequestStatus] = mapped_column(
        Enum(JoinRequestStatus, name="join_request_status_enum", native_enum=True),
        nullable=False,
    )
    actor_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    join_request: Mapped[JoinRequest] = relationship("JoinRequest", back_populates="events")


def current_status_subquery() -> Subquery:
    """Latest status per join request as ``(join_request_id, status, changed_at)``."""
    latest = (
        select(
            JoinRequestEvent.join_request_id.label("join_request_id"),
            func.max(JoinRequestEvent.sequence).label("sequence"),
        )
        .group_by(JoinRequestEvent.join_request_id)
        .subquery("latest_join_request_event")
    )
    return (
        select(
            JoinRequestEvent.join_request_id.label("join_request_id"),
            JoinRequestEvent.status.label("status"),
            JoinRequestEvent.created_at.label("changed_at"),
        )
        .join(
            latest,
            and_(
                latest.c.join_request_id == JoinRequestEvent.join_request_id,
                latest.c.sequence == JoinRequestEvent.sequence,
            ),
        )
        .subquery("join_request_status")
    )
