from __future__ import annotations

from app.models.skill import SkillCategory
from app.schemas.common import ORMModel


class SkillRead(ORMModel):
    id: int
    name: str
    category: SkillCategory
