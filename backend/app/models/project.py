from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from sqlalchemy import JSON, CheckConstraint, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, BaseModel
from app.models.skill import project_skills

if TYPE_CHECKING:
    from app.models.join_request import JoinRequest
    from app.models.project_interest import ProjectInterest
    from app.models.project_member import ProjectMember
    from app.models.project_task import ProjectTask
    from app.models.skill import Skill
    from app.models.user import User

MIN_TEAM_SIZE = 2
MAX_TEAM_SIZE = 20
DEFAULT_TEAM_SIZE = 5


class ProjectStatus(str, enum.Enum):
    RECRUITING = "RECRUITING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class ProjectVisibility(str, enum.Enum):
    PUBLIC = "PUBLIC"
    UNLISTED = "UNLISTED"


class Project(BaseModel, Base):
    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint(
            f"max_team_size >= {MIN_TEAM_SIZE} AND max_team_size <= {MAX_TEAM_SIZE}",
            name="max_team_size_range",
        ),
    )

    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    max_team_size: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_TEAM_SIZE)
    github_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[ProjectStatus] = mapped_column(
        Enum(ProjectStatus, name="project_status_enum", native_enum=True),
        nullable=False,
        default=ProjectStatus.RECRUITING,
        index=True,
    )
    visibility: Mapped[ProjectVisibility] = mapped_column(
        Enum(ProjectVisibility, name="project_visibility_enum", native_enum=True),
        nullable=False,
        default=ProjectVisibility.PUBLIC,
    )
    custom_skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    owner: Mapped["User"] = relationship("User", back_populates="projects_owned")
    members: Mapped[list["ProjectMember"]] = relationship(
        "ProjectMember",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectMember.joined_at, ProjectMember.id",
    )
    tasks: Mapped[list["ProjectTask"]] = relationship(
        "ProjectTask",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectTask.id",
    )
    skills: Mapped[list["Skill"]] = relationship("Skill", secondary=project_skills, order_by="Skill.name")
    join_requests: Mapped[list["JoinRequest"]] = relationship(
        "JoinRequest",
        back_populates="project",
        cascade="all, delete-orphan",
    )
    interests: Mapped[list["ProjectInterest"]] = relationship(
        "ProjectInterest",
        back_populates="project",
        cascade="all, delete-orphan",
    )
