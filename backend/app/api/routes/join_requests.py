from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.response import ResponseEnvelope, success_response
from app.core.authz import get_current_user
from app.db.session import get_db
from app.models import JoinRequest, JoinRequestStatus, User
from app.schemas.join_request import JoinRequestCreate, JoinRequestRead, JoinRequestReview, MembershipStatusRead
from app.services.membership import MembershipService

router = APIRouter(prefix="/projects", tags=["membership"])


def _serialize_join_request(join_request: JoinRequest) -> dict:
    user = join_request.user
    return JoinRequestRead(
        id=join_request.id,
        project_id=join_request.project_id,
        user_id=join_request.user_id,
        user_first_name=user.first_name,
        user_last_name=user.last_name,
        user_profile_pic_url=user.profile_pic_url,
        message=join_request.message,
        status=join_request.status,
        reviewed_at=join_request.reviewed_at,
        created_at=join_request.created_at,
    ).model_dump(mode="json")


@router.post("/{project_id}/join-requests", response_model=ResponseEnvelope, status_code=status.HTTP_201_CREATED)
def create_join_request(
    project_id: int,
    payload: JoinRequestCreate | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    message = payload.message if payload is not None else None
    join_request = MembershipService(db, current_user).create_join_request(project_id, message)
    return success_response(_serialize_join_request(join_request), message="Join request submitted successfully")


@router.get("/{project_id}/join-requests", response_model=ResponseEnvelope)
def list_join_requests(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    join_requests = MembershipService(db, current_user).list_pending(project_id)
    return success_response([_serialize_join_request(item) for item in join_requests])


@router.delete("/{project_id}/join-requests/me", response_model=ResponseEnvelope)
def cancel_join_request(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    join_request = MembershipService(db, current_user).cancel_join_request(project_id)
    return success_response(_serialize_join_request(join_request), message="Join request cancelled")


@router.put("/{project_id}/join-requests/{request_id}", response_model=ResponseEnvelope)
def review_join_request(
    project_id: int,
    request_id: int,
    payload: JoinRequestReview,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    join_request = MembershipService(db, current_user).review(project_id, request_id, payload.status)
    outcome = "approved" if payload.status is JoinRequestStatus.APPROVED else "rejected"
    return success_response(_serialize_join_request(join_request), message=f"Join request {outcome}")


@router.delete("/{project_id}/members/me", response_model=ResponseEnvelope)
def leave_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    MembershipService(db, current_user).leave(project_id)
    return success_response(None, message="You have left the project")


@router.delete("/{project_id}/members/{user_id}", response_model=ResponseEnvelope)
def remove_member(
    project_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    MembershipService(db, current_user).remove_member(project_id, user_id)
    return success_response(None, message="Member removed from project")


@router.post("/{project_id}/interest", response_model=ResponseEnvelope)
def add_interest(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    MembershipService(db, current_user).add_interest(project_id)
    return success_response({"interested": True}, message="Project bookmarked")


@router.delete("/{project_id}/interest", response_model=ResponseEnvelope)
def remove_interest(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    MembershipService(db, current_user).remove_interest(project_id)
    return success_response({"interested": False}, message="Bookmark removed")


@router.get("/{project_id}/membership-status", response_model=ResponseEnvelope)
def get_membership_status(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    service = MembershipService(db, current_user)
    membership_status = service.get_user_project_status(project_id)
    payload = MembershipStatusRead(status=membership_status.value, interested=service.is_interested(project_id))
    return success_response(payload.model_dump(mode="json"))
