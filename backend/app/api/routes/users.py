from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.response import ResponseEnvelope, success_response
from app.core.authz import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.schemas.user import UserRead, UserSkillsUpdate, UserUpdate
from app.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])


def _serialize_user(user: User) -> dict:
    return UserRead.model_validate(user).model_dump(mode="json")


@router.get("/me", response_model=ResponseEnvelope)
def get_me(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    user = UserService(db, current_user).get_user(current_user.id)
    return success_response(_serialize_user(user))


@router.put("/me", response_model=ResponseEnvelope)
def update_me(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    user = UserService(db, current_user).update_profile(payload)
    return success_response(_serialize_user(user), message="Profile updated successfully")


@router.put("/me/skills", response_model=ResponseEnvelope)
def update_my_skills(
    payload: UserSkillsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    user = UserService(db, current_user).replace_skills(payload)
    return success_response(_serialize_user(user), message="Skills updated successfully")


@router.get("/{user_id}", response_model=ResponseEnvelope)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    user = UserService(db, current_user).get_user(user_id)
    return success_response(_serialize_user(user))
