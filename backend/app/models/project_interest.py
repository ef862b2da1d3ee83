from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, CreatedAtMixin

if TYPE_CHECKING:
    from app.models.project import Project
    from app.models.user import User


class ProjectInterest(CreatedAtMixin, Base):
    """A user's bookmark on a project."""

    __tablename__ = "project_interests"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    project: Mapped["Project"] = relationship("Project", back_populates="interests")
    user: Mapped["User"] = relationship("User")
