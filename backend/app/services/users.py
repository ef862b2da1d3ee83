from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.core.errors import not_found
from app.logging import get_logger
from app.models import Skill, User
from app.schemas.common import strip_or_none
from app.schemas.user import UserSkillsUpdate, UserUpdate
from app.services.projects import resolve_skills

logger = get_logger()

_URL_FIELDS = ("profile_pic_url", "linkedin_url", "github_url")
_TEXT_FIELDS = ("first_name", "last_name", "bio", "school_name")


def _normalize_custom_skills(values: list[str]) -> list[str]:
    normalized: list[str] = []
    seen: set[str] = set()
    for value in values:
        candidate = value.strip()
        if candidate and candidate.lower() not in seen:
            seen.add(candidate.lower())
            normalized.append(candidate[:100])
    return normalized


class UserService:
    def __init__(self, session: Session, actor: User | None = None) -> None:
        self.session = session
        self.actor = actor

    def get_user(self, user_id: int) -> User:
        stmt = select(User).where(User.id == user_id).options(selectinload(User.skills))
        user = self.session.execute(stmt).scalar_one_or_none()
        if user is None:
            raise not_found("User not found")
        return user

    def update_profile(self, payload: UserUpdate) -> User:
        user = self.actor
        data: dict[str, Any] = payload.model_dump(exclude_unset=True)

        for field in _TEXT_FIELDS:
            if field not in data or data[field] is None:
                continue
            value = data[field].strip()
            if field in ("first_name", "last_name"):
                setattr(user, field, value)
            else:
                setattr(user, field, value or None)
        for field in _URL_FIELDS:
            if field in data:
                setattr(user, field, strip_or_none(data[field]))
        if data.get("custom_skills") is not None:
            user.custom_skills = _normalize_custom_skills(data["custom_skills"])

        self.session.commit()
        logger.info("user_profile_updated", user_id=user.id, fields=sorted(data.keys()))
        return self.get_user(user.id)

    def replace_skills(self, payload: UserSkillsUpdate) -> User:
        user = self.get_user(self.actor.id)
        skills: list[Skill] = resolve_skills(self.session, payload.skill_ids)
        user.skills = skills
        if payload.custom_skills is not None:
            user.custom_skills = _normalize_custom_skills(payload.custom_skills)
        self.session.commit()
        logger.info("user_skills_updated", user_id=user.id, skill_count=len(skills))
        return user
