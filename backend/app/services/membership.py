"""Join-request lifecycle and project membership.

Every transition runs in the caller's session and commits once. Join requests
are append-only: a decision adds a ``JoinRequestEvent`` row and never edits an
earlier one, so a (project, user) pair can cycle through any number of
requests.
"""

from __future__ import annotations

import enum

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.errors import bad_request, conflict, forbidden, not_found
from app.logging import get_logger
from app.models import (
    MEMBER_ROLE,
    JoinRequest,
    JoinRequestEvent,
    JoinRequestStatus,
    NotificationType,
    Project,
    ProjectInterest,
    ProjectMember,
    User,
    current_status_subquery,
)
from app.models.join_request import DECISION_SEQUENCE, OPENED_SEQUENCE
from app.observability.metrics import record_join_request_transition, record_membership_change
from app.services.notifications import NotificationDispatcher

logger = get_logger()

ALREADY_REVIEWED = "This join request has already been reviewed"


class MembershipStatus(str, enum.Enum):
    OWNER = "OWNER"
    MEMBER = "MEMBER"
    PENDING = "PENDING"
    NONE = "NONE"


class MembershipService:
    def __init__(
        self,
        session: Session,
        actor: User,
        *,
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        self.session = session
        self.actor = actor
        self.dispatcher = dispatcher or NotificationDispatcher(session)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def _get_project(self, project_id: int, *, lock: bool = False) -> Project:
        stmt = select(Project).where(Project.id == project_id)
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        project = self.session.execute(stmt).scalar_one_or_none()
        if project is None:
            raise not_found("Project not found")
        return project

    def _ensure_owner(self, project: Project) -> None:
        if project.owner_id != self.actor.id:
            raise forbidden("Only the project owner can perform this action")

    def _member_count(self, project_id: int) -> int:
        stmt = select(func.count()).select_from(ProjectMember).where(ProjectMember.project_id == project_id)
        return self.session.execute(stmt).scalar_one()

    def _get_membership(self, project_id: int, user_id: int) -> ProjectMember | None:
        stmt = select(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == user_id,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def _pending_requests(self, project_id: int) -> Select:
        status = current_status_subquery()
        return (
            select(JoinRequest)
            .join(status, status.c.join_request_id == JoinRequest.id)
            .where(
                JoinRequest.project_id == project_id,
                status.c.status == JoinRequestStatus.PENDING,
            )
        )

    def _find_pending(self, project_id: int, user_id: int) -> JoinRequest | None:
        stmt = (
            self._pending_requests(project_id)
            .where(JoinRequest.user_id == user_id)
            .order_by(JoinRequest.id.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def _record_decision(self, join_request: JoinRequest, decision: JoinRequestStatus) -> None:
        join_request.events.append(
            JoinRequestEvent(sequence=DECISION_SEQUENCE, status=decision, actor_id=self.actor.id)
        )
        try:
            self.session.flush()
        except IntegrityError:
            self.session.rollback()
            logger.warning(
                "join_request_decision_conflict",
                join_request_id=join_request.id,
                decision=decision.value,
            )
            raise bad_request(ALREADY_REVIEWED) from None

    # ------------------------------------------------------------------
    # Join requests
    # ------------------------------------------------------------------

    def create_join_request(self, project_id: int, message: str | None = None) -> JoinRequest:
        project = self._get_project(project_id, lock=True)
        if project.owner_id == self.actor.id:
            raise bad_request("You cannot request to join your own project")
        if self._get_membership(project.id, self.actor.id) is not None:
            raise conflict("You are already a member of this project")
        if self._find_pending(project.id, self.actor.id) is not None:
            raise conflict("You already have a pending join request for this project")
        if self._member_count(project.id) >= project.max_team_size:
            raise bad_request("This project's team is full")

        join_request = JoinRequest(project_id=project.id, user_id=self.actor.id, message=message)
        join_request.events.append(
            JoinRequestEvent(sequence=OPENED_SEQUENCE, status=JoinRequestStatus.PENDING, actor_id=self.actor.id)
        )
        self.session.add(join_request)
        self.session.flush()

        self.dispatcher.notify(
            project.owner_id,
            NotificationType.JOIN_REQUEST_RECEIVED,
            f"{self.actor.full_name} wants to join {project.title}",
            reference_id=project.id,
            body=message,
        )
        self.session.commit()

        record_join_request_transition(JoinRequestStatus.PENDING.value)
        logger.info(
            "join_request_created",
            project_id=project.id,
            join_request_id=join_request.id,
            user_id=self.actor.id,
        )
        return join_request

    def list_pending(self, project_id: int) -> list[JoinRequest]:
        project = self._get_project(project_id)
        self._ensure_owner(project)
        stmt = (
            self._pending_requests(project.id)
            .options(selectinload(JoinRequest.user))
            .order_by(JoinRequest.created_at.desc(), JoinRequest.id.desc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def review(self, project_id: int, request_id: int, decision: JoinRequestStatus) -> JoinRequest:
        if decision not in (JoinRequestStatus.APPROVED, JoinRequestStatus.REJECTED):
            raise bad_request("Decision must be APPROVED or REJECTED")

        project = self._get_project(project_id, lock=True)
        self._ensure_owner(project)

        join_request = self.session.get(JoinRequest, request_id)
        if join_request is None or join_request.project_id != project.id:
            raise not_found("Join request not found for this project")
        if join_request.status is not JoinRequestStatus.PENDING:
            raise bad_request(ALREADY_REVIEWED)

        if decision is JoinRequestStatus.APPROVED:
            if self._member_count(project.id) >= project.max_team_size:
                raise bad_request("Cannot approve: team is full")
            self.session.add(
                ProjectMember(project_id=project.id, user_id=join_request.user_id, role=MEMBER_ROLE)
            )
        self._record_decision(join_request, decision)

        outcome = "approved" if decision is JoinRequestStatus.APPROVED else "rejected"
        notification_type = (
            NotificationType.JOIN_REQUEST_APPROVED
            if decision is JoinRequestStatus.APPROVED
            else NotificationType.JOIN_REQUEST_REJECTED
        )
        self.dispatcher.notify(
            join_request.user_id,
            notification_type,
            f"Your request to join {project.title} was {outcome}",
            reference_id=project.id,
        )
        self.session.commit()

        record_join_request_transition(decision.value)
        if decision is JoinRequestStatus.APPROVED:
            record_membership_change("added")
        logger.info(
            "join_request_reviewed",
            project_id=project.id,
            join_request_id=join_request.id,
            user_id=join_request.user_id,
            decision=decision.value,
        )
        return join_request

    def cancel_join_request(self, project_id: int) -> JoinRequest:
        project = self._get_project(project_id, lock=True)
        join_request = self._find_pending(project.id, self.actor.id)
        if join_request is None:
            raise not_found("You have no pending join request for this project")

        self._record_decision(join_request, JoinRequestStatus.CANCELLED)
        self.dispatcher.notify(
            project.owner_id,
            NotificationType.JOIN_REQUEST_CANCELLED,
            f"{self.actor.full_name} withdrew their request to join {project.title}",
            reference_id=project.id,
        )
        self.session.commit()

        record_join_request_transition(JoinRequestStatus.CANCELLED.value)
        logger.info(
            "join_request_cancelled",
            project_id=project.id,
            join_request_id=join_request.id,
            user_id=self.actor.id,
        )
        return join_request

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def leave(self, project_id: int) -> None:
        project = self._get_project(project_id)
        if project.owner_id == self.actor.id:
            raise bad_request("The project owner cannot leave. Delete the project instead.")
        membership = self._get_membership(project.id, self.actor.id)
        if membership is None:
            raise bad_request("You are not a member of this project")

        self.session.delete(membership)
        self.session.flush()
        self.dispatcher.notify(
            project.owner_id,
            NotificationType.MEMBER_LEFT,
            f"{self.actor.full_name} left {project.title}",
            reference_id=project.id,
        )
        self.session.commit()

        record_membership_change("left")
        logger.info("member_left", project_id=project.id, user_id=self.actor.id)

    def remove_member(self, project_id: int, user_id: int) -> None:
        project = self._get_project(project_id)
        self._ensure_owner(project)
        if user_id == self.actor.id:
            raise bad_request("You cannot remove yourself from the project")
        membership = self._get_membership(project.id, user_id)
        if membership is None:
            raise not_found("Member not found in this project")

        self.session.delete(membership)
        self.session.flush()
        self.dispatcher.notify(
            user_id,
            NotificationType.MEMBER_REMOVED,
            f"You were removed from {project.title}",
            reference_id=project.id,
        )
        self.session.commit()

        record_membership_change("removed")
        logger.info("member_removed", project_id=project.id, user_id=user_id, removed_by=self.actor.id)

    # ------------------------------------------------------------------
    # Interest (bookmarks)
    # ------------------------------------------------------------------

    def add_interest(self, project_id: int) -> None:
        project = self._get_project(project_id)
        if project.owner_id == self.actor.id:
            raise bad_request("You cannot bookmark your own project")
        if self.session.get(ProjectInterest, (self.actor.id, project.id)) is not None:
            return
        self.session.add(ProjectInterest(user_id=self.actor.id, project_id=project.id))
        try:
            self.session.commit()
        except IntegrityError:
            # A concurrent request stored the same bookmark.
            self.session.rollback()
            return
        logger.info("interest_added", project_id=project.id, user_id=self.actor.id)

    def remove_interest(self, project_id: int) -> None:
        project = self._get_project(project_id)
        interest = self.session.get(ProjectInterest, (self.actor.id, project.id))
        if interest is None:
            return
        self.session.delete(interest)
        self.session.commit()
        logger.info("interest_removed", project_id=project.id, user_id=self.actor.id)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_user_project_status(self, project_id: int) -> MembershipStatus:
        project = self._get_project(project_id)
        if project.owner_id == self.actor.id:
            return MembershipStatus.OWNER
        if self._get_membership(project.id, self.actor.id) is not None:
            return MembershipStatus.MEMBER
        if self._find_pending(project.id, self.actor.id) is not None:
            return MembershipStatus.PENDING
        return MembershipStatus.NONE

    def is_interested(self, project_id: int) -> bool:
        return self.session.get(ProjectInterest, (self.actor.id, project_id)) is not None
