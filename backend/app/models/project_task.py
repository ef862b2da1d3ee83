from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, CreatedAtMixin, IntegerPrimaryKeyMixin

if TYPE_CHECKING:
    from app.models.project import Project


class ProjectTask(IntegerPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "project_tasks"

    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_filled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    project: Mapped["Project"] = relationship("Project", back_populates="tasks")
