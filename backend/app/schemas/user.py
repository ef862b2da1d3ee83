from __future__ import annotations

from typing import List

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.common import IdentifierModel, UTCDateTime
from app.schemas.skill import SkillRead


class UserBase(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str | EmailStr) -> str | EmailStr:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class UserCreate(UserBase):
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class UserRead(IdentifierModel):
    email: EmailStr
    first_name: str
    last_name: str
    bio: str | None = None
    profile_pic_url: str | None = None
    linkedin_url: str | None = None
    github_url: str | None = None
    school_name: str | None = None
    skills: List[SkillRead] = Field(default_factory=list)
    custom_skills: List[str] = Field(default_factory=list)
    updated_at: UTCDateTime


class UserUpdate(BaseModel):
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    bio: str | None = Field(default=None, max_length=2000)
    profile_pic_url: str | None = Field(default=None, max_length=500)
    linkedin_url: str | None = Field(default=None, max_length=500)
    github_url: str | None = Field(default=None, max_length=500)
    school_name: str | None = Field(default=None, max_length=200)
    custom_skills: List[str] | None = None

    @field_validator("first_name", "last_name")
    @classmethod
    def names_not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("must not be blank")
        return value


class UserSkillsUpdate(BaseModel):
    skill_ids: List[int] = Field(default_factory=list)
    custom_skills: List[str] | None = None
