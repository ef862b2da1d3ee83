from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.response import ResponseEnvelope, success_response
from app.core.authz import get_current_user
from app.core.config import get_settings
from app.db.session import get_db
from app.models.user import User
from app.schemas.common import paginated
from app.schemas.notification import NotificationRead
from app.services.notifications import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=ResponseEnvelope)
def list_notifications(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int | None = Query(None, ge=1, description="Page size"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    settings = get_settings()
    size = min(page_size or settings.notifications_page_size, settings.max_page_size)
    notifications, total = NotificationService(db, current_user).list_notifications(page=page, page_size=size)
    items = [NotificationRead.model_validate(item).model_dump(mode="json") for item in notifications]
    return success_response(paginated(items, page=page, page_size=size, total=total))


@router.get("/unread-count", response_model=ResponseEnvelope)
def unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    return success_response({"count": NotificationService(db, current_user).unread_count()})


@router.put("/read-all", response_model=ResponseEnvelope)
def mark_all_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    updated = NotificationService(db, current_user).mark_all_read()
    return success_response({"updated": updated}, message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=ResponseEnvelope)
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    notification = NotificationService(db, current_user).mark_read(notification_id)
    return success_response(
        NotificationRead.model_validate(notification).model_dump(mode="json"),
        message="Notification marked as read",
    )
