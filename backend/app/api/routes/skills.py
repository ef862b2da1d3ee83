from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.response import ResponseEnvelope, success_response
from app.db.session import get_db
from app.schemas.skill import SkillRead
from app.services.skills import group_skills_by_category, list_skills

router = APIRouter(prefix="/skills", tags=["skills"])


def _dump(skill) -> dict:
    return SkillRead.model_validate(skill).model_dump(mode="json")


@router.get("", response_model=ResponseEnvelope)
def list_skills_by_category(db: Session = Depends(get_db)) -> dict:
    grouped = group_skills_by_category(list_skills(db))
    return success_response({category: [_dump(skill) for skill in skills] for category, skills in grouped.items()})


@router.get("/all", response_model=ResponseEnvelope)
def list_all_skills(db: Session = Depends(get_db)) -> dict:
    return success_response([_dump(skill) for skill in list_skills(db)])
