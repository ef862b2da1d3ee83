from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator

from app.models.project import DEFAULT_TEAM_SIZE, MAX_TEAM_SIZE, MIN_TEAM_SIZE, ProjectStatus, ProjectVisibility
from app.schemas.common import IdentifierModel, ORMModel, UTCDateTime
from app.schemas.skill import SkillRead


def _normalize_custom_skills(values: List[str] | None) -> List[str] | None:
    if values is None:
        return None
    normalized: List[str] = []
    seen: set[str] = set()
    for value in values:
        candidate = value.strip()
        if not candidate or candidate.lower() in seen:
            continue
        seen.add(candidate.lower())
        normalized.append(candidate[:100])
    return normalized


class ProjectTaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    is_filled: bool = False

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class ProjectTaskRead(ORMModel):
    id: int
    title: str
    description: str | None = None
    is_filled: bool


class ProjectCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=5000)
    max_team_size: int = Field(default=DEFAULT_TEAM_SIZE, ge=MIN_TEAM_SIZE, le=MAX_TEAM_SIZE)
    github_url: str | None = Field(default=None, max_length=500)
    visibility: ProjectVisibility = ProjectVisibility.PUBLIC
    skill_ids: List[int] = Field(default_factory=list)
    custom_skills: List[str] = Field(default_factory=list)
    tasks: List[ProjectTaskCreate] = Field(default_factory=list)

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @field_validator("custom_skills")
    @classmethod
    def normalize_custom_skills(cls, value: List[str]) -> List[str]:
        return _normalize_custom_skills(value) or []


class ProjectUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=5000)
    max_team_size: int | None = Field(default=None, ge=MIN_TEAM_SIZE, le=MAX_TEAM_SIZE)
    github_url: str | None = Field(default=None, max_length=500)
    status: ProjectStatus | None = None
    visibility: ProjectVisibility | None = None
    skill_ids: List[int] | None = None
    custom_skills: List[str] | None = None
    tasks: List[ProjectTaskCreate] | None = None

    @field_validator("title", "description")
    @classmethod
    def strip_optional_text(cls, value: str | None) -> str | None:
        if value is None:
            return value
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @field_validator("custom_skills")
    @classmethod
    def normalize_custom_skills(cls, value: List[str] | None) -> List[str] | None:
        return _normalize_custom_skills(value)


class ProjectMemberRead(BaseModel):
    id: int
    user_id: int
    first_name: str
    last_name: str
    profile_pic_url: str | None = None
    role: str
    joined_at: UTCDateTime


class ProjectRead(IdentifierModel):
    owner_id: int
    owner_first_name: str
    owner_last_name: str
    title: str
    description: str
    max_team_size: int
    member_count: int
    github_url: str | None = None
    status: ProjectStatus
    visibility: ProjectVisibility
    skills: List[SkillRead] = Field(default_factory=list)
    custom_skills: List[str] = Field(default_factory=list)
    tasks: List[ProjectTaskRead] = Field(default_factory=list)
    members: List[ProjectMemberRead] = Field(default_factory=list)
    updated_at: UTCDateTime
