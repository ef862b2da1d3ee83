from __future__ import annotations

import enum

from sqlalchemy import Column, Enum, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, BigIntegerId, CreatedAtMixin, IntegerPrimaryKeyMixin


class SkillCategory(str, enum.Enum):
    LANGUAGE = "LANGUAGE"
    FRAMEWORK = "FRAMEWORK"
    TOOL = "TOOL"
    CONCEPT = "CONCEPT"
    OTHER = "OTHER"


project_skills = Table(
    "project_skills",
    Base.metadata,
    Column("project_id", BigIntegerId, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", BigIntegerId, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)

user_skills = Table(
    "user_skills",
    Base.metadata,
    Column("user_id", BigIntegerId, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", BigIntegerId, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)


class Skill(IntegerPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "skills"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    category: Mapped[SkillCategory] = mapped_column(
        Enum(SkillCategory, name="skill_category_enum", native_enum=True),
        nullable=False,
        default=SkillCategory.OTHER,
    )
