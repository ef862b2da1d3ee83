from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import Skill, SkillCategory


def list_skills(session: Session) -> list[Skill]:
    return list(session.execute(select(Skill).order_by(Skill.name)).scalars().all())


def group_skills_by_category(skills: list[Skill]) -> dict[str, list[Skill]]:
    grouped: dict[str, list[Skill]] = {category.value: [] for category in SkillCategory}
    for skill in skills:
        grouped[skill.category.value].append(skill)
    return {category: items for category, items in grouped.items() if items}
