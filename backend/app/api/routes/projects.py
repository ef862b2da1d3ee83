from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.response import ResponseEnvelope, success_response
from app.core.authz import get_current_user
from app.core.config import get_settings
from app.core.errors import bad_request
from app.db.session import get_db
from app.models import Project, ProjectMember, ProjectStatus, User
from app.schemas.common import paginated
from app.schemas.project import (
    ProjectCreate,
    ProjectMemberRead,
    ProjectRead,
    ProjectTaskRead,
    ProjectUpdate,
)
from app.schemas.skill import SkillRead
from app.services.projects import ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])


def _parse_skill_ids(raw: List[str] | None) -> list[int]:
    if not raw:
        return []
    skill_ids: list[int] = []
    for chunk in raw:
        for item in chunk.split(","):
            candidate = item.strip()
            if not candidate:
                continue
            try:
                skill_ids.append(int(candidate))
            except ValueError:
                raise bad_request(f"Invalid skill id: {candidate}") from None
    return skill_ids


def _member_read(member: ProjectMember) -> ProjectMemberRead:
    return ProjectMemberRead(
        id=member.id,
        user_id=member.user_id,
        first_name=member.user.first_name,
        last_name=member.user.last_name,
        profile_pic_url=member.user.profile_pic_url,
        role=member.role,
        joined_at=member.joined_at,
    )


def serialize_member(member: ProjectMember) -> dict:
    return _member_read(member).model_dump(mode="json")


def serialize_project(project: Project) -> dict:
    return ProjectRead(
        id=project.id,
        created_at=project.created_at,
        updated_at=project.updated_at,
        owner_id=project.owner_id,
        owner_first_name=project.owner.first_name,
        owner_last_name=project.owner.last_name,
        title=project.title,
        description=project.description,
        max_team_size=project.max_team_size,
        member_count=len(project.members),
        github_url=project.github_url,
        status=project.status,
        visibility=project.visibility,
        skills=[SkillRead.model_validate(skill) for skill in project.skills],
        custom_skills=list(project.custom_skills or []),
        tasks=[ProjectTaskRead.model_validate(task) for task in project.tasks],
        members=[_member_read(member) for member in project.members],
    ).model_dump(mode="json")


@router.post("", response_model=ResponseEnvelope, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    project = ProjectService(db, current_user).create_project(payload)
    return success_response(serialize_project(project), message="Project created successfully")


@router.get("", response_model=ResponseEnvelope)
def list_projects(
    q: str | None = Query(None, max_length=200, description="Search title and description"),
    skill_ids: List[str] | None = Query(None, description="Skill ids, repeated or comma separated"),
    status_filter: ProjectStatus | None = Query(None, alias="status", description="Status filter"),
    school: str | None = Query(None, max_length=200, description="Owner school name"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int | None = Query(None, ge=1, description="Page size"),
    db: Session = Depends(get_db),
) -> dict:
    settings = get_settings()
    size = min(page_size or settings.default_page_size, settings.max_page_size)
    projects, total = ProjectService(db).list_projects(
        q=q,
        skill_ids=_parse_skill_ids(skill_ids),
        status=status_filter,
        school=school,
        page=page,
        page_size=size,
    )
    return success_response(
        paginated([serialize_project(project) for project in projects], page=page, page_size=size, total=total)
    )


@router.get("/me/owned", response_model=ResponseEnvelope)
def list_owned_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    projects = ProjectService(db, current_user).owned_projects()
    return success_response([serialize_project(project) for project in projects])


@router.get("/me/joined", response_model=ResponseEnvelope)
def list_joined_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    projects = ProjectService(db, current_user).joined_projects()
    return success_response([serialize_project(project) for project in projects])


@router.get("/me/interested", response_model=ResponseEnvelope)
def list_interested_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    projects = ProjectService(db, current_user).interested_projects()
    return success_response([serialize_project(project) for project in projects])


@router.get("/{project_id}", response_model=ResponseEnvelope)
def get_project(project_id: int, db: Session = Depends(get_db)) -> dict:
    project = ProjectService(db).get_project(project_id)
    return success_response(serialize_project(project))


@router.get("/{project_id}/members", response_model=ResponseEnvelope)
def list_project_members(project_id: int, db: Session = Depends(get_db)) -> dict:
    members = ProjectService(db).list_members(project_id)
    return success_response([serialize_member(member) for member in members])


@router.put("/{project_id}", response_model=ResponseEnvelope)
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    project = ProjectService(db, current_user).update_project(project_id, payload)
    return success_response(serialize_project(project), message="Project updated successfully")


@router.delete("/{project_id}", response_model=ResponseEnvelope)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    ProjectService(db, current_user).delete_project(project_id)
    return success_response(None, message="Project deleted successfully")
