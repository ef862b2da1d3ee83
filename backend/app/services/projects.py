from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import Session, selectinload

from app.core.errors import bad_request, forbidden, not_found
from app.logging import get_logger
from app.models import (
    OWNER_ROLE,
    Project,
    ProjectInterest,
    ProjectMember,
    ProjectStatus,
    ProjectTask,
    ProjectVisibility,
    Skill,
    User,
    project_skills,
)
from app.schemas.common import strip_or_none
from app.schemas.project import ProjectCreate, ProjectUpdate

logger = get_logger()

_SCALAR_UPDATE_FIELDS = ("title", "description", "max_team_size", "status", "visibility", "custom_skills")


def _with_details(stmt: Select) -> Select:
    return stmt.options(
        selectinload(Project.owner),
        selectinload(Project.members).selectinload(ProjectMember.user),
        selectinload(Project.tasks),
        selectinload(Project.skills),
    )


def resolve_skills(session: Session, skill_ids: Iterable[int]) -> list[Skill]:
    """Unknown ids are ignored."""
    unique_ids = {int(skill_id) for skill_id in skill_ids}
    if not unique_ids:
        return []
    stmt = select(Skill).where(Skill.id.in_(unique_ids)).order_by(Skill.name)
    return list(session.execute(stmt).scalars().all())


class ProjectService:
    def __init__(self, session: Session, actor: User | None = None) -> None:
        self.session = session
        self.actor = actor

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def get_project(self, project_id: int) -> Project:
        stmt = _with_details(select(Project).where(Project.id == project_id))
        project = self.session.execute(stmt).scalar_one_or_none()
        if project is None:
            raise not_found("Project not found")
        return project

    def _require_actor(self) -> User:
        if self.actor is None:
            raise forbidden("Authentication required")
        return self.actor

    def _get_owned_project(self, project_id: int, *, lock: bool = False) -> Project:
        actor = self._require_actor()
        if lock:
            stmt = select(Project).where(Project.id == project_id).with_for_update()
            project = self.session.execute(stmt.execution_options(populate_existing=True)).scalar_one_or_none()
            if project is None:
                raise not_found("Project not found")
        else:
            project = self.get_project(project_id)
        if project.owner_id != actor.id:
            raise forbidden("Only the project owner can perform this action")
        return project

    def list_projects(
        self,
        *,
        q: str | None = None,
        skill_ids: Iterable[int] | None = None,
        status: ProjectStatus | None = None,
        school: str | None = None,
        page: int = 1,
        page_size: int = 9,
    ) -> tuple[list[Project], int]:
        stmt = select(Project).where(Project.visibility == ProjectVisibility.PUBLIC)

        query = strip_or_none(q)
        if query:
            pattern = f"%{query}%"
            stmt = stmt.where(or_(Project.title.ilike(pattern), Project.description.ilike(pattern)))
        if status is not None:
            stmt = stmt.where(Project.status == status)
        skill_set = {int(skill_id) for skill_id in skill_ids or []}
        if skill_set:
            matching = select(project_skills.c.project_id).where(project_skills.c.skill_id.in_(skill_set))
            stmt = stmt.where(Project.id.in_(matching))
        school_name = strip_or_none(school)
        if school_name:
            stmt = stmt.join(User, User.id == Project.owner_id).where(User.school_name == school_name)

        total = self.session.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        stmt = (
            _with_details(stmt)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(self.session.execute(stmt).scalars().all()), total

    def _member_count(self, project_id: int) -> int:
        stmt = select(func.count()).select_from(ProjectMember).where(ProjectMember.project_id == project_id)
        return self.session.execute(stmt).scalar_one()

    def list_members(self, project_id: int) -> list[ProjectMember]:
        return list(self.get_project(project_id).members)

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def owned_projects(self) -> list[Project]:
        actor = self._require_actor()
        stmt = _with_details(select(Project).where(Project.owner_id == actor.id))
        return list(self.session.execute(stmt.order_by(Project.created_at.desc(), Project.id.desc())).scalars().all())

    def joined_projects(self) -> list[Project]:
        actor = self._require_actor()
        stmt = _with_details(
            select(Project)
            .join(ProjectMember, ProjectMember.project_id == Project.id)
            .where(ProjectMember.user_id == actor.id, Project.owner_id != actor.id)
        )
        return list(self.session.execute(stmt.order_by(ProjectMember.joined_at.desc(), Project.id.desc())).scalars().all())

    def interested_projects(self) -> list[Project]:
        actor = self._require_actor()
        stmt = _with_details(
            select(Project)
            .join(ProjectInterest, ProjectInterest.project_id == Project.id)
            .where(ProjectInterest.user_id == actor.id)
        )
        return list(self.session.execute(stmt.order_by(ProjectInterest.created_at.desc(), Project.id.desc())).scalars().all())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_project(self, payload: ProjectCreate) -> Project:
        actor = self._require_actor()
        project = Project(
            owner_id=actor.id,
            title=payload.title,
            description=payload.description,
            max_team_size=payload.max_team_size,
            github_url=strip_or_none(payload.github_url),
            visibility=payload.visibility,
            status=ProjectStatus.RECRUITING,
            custom_skills=list(payload.custom_skills),
        )
        project.skills = resolve_skills(self.session, payload.skill_ids)
        project.tasks = [ProjectTask(**task.model_dump()) for task in payload.tasks]
        project.members.append(ProjectMember(user_id=actor.id, role=OWNER_ROLE))

        self.session.add(project)
        self.session.commit()
        logger.info("project_created", project_id=project.id, owner_id=actor.id)
        return self.get_project(project.id)

    def update_project(self, project_id: int, payload: ProjectUpdate) -> Project:
        project = self._get_owned_project(project_id, lock=True)
        data: dict[str, Any] = payload.model_dump(exclude_unset=True)

        new_size = data.get("max_team_size")
        if new_size is not None and new_size < self._member_count(project.id):
            raise bad_request("Max team size cannot be less than the current number of members")

        for field in _SCALAR_UPDATE_FIELDS:
            value = data.get(field)
            if value is not None:
                setattr(project, field, value)
        if "github_url" in data:
            project.github_url = strip_or_none(data["github_url"])
        if data.get("skill_ids") is not None:
            project.skills = resolve_skills(self.session, data["skill_ids"])
        if data.get("tasks") is not None:
            project.tasks = [ProjectTask(**task) for task in data["tasks"]]

        self.session.commit()
        logger.info("project_updated", project_id=project.id, fields=sorted(data.keys()))
        return self.get_project(project.id)

    def delete_project(self, project_id: int) -> None:
        project = self._get_owned_project(project_id)
        self.session.delete(project)
        self.session.commit()
        logger.info("project_deleted", project_id=project_id, owner_id=project.owner_id)
