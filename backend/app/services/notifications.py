"""In-app notifications: recording them as a side effect and reading them back."""

from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import not_found
from app.logging import get_logger
from app.models import Notification, NotificationType, User
from app.models.notification import PROJECT_REFERENCE
from app.observability.metrics import record_notification_failed, record_notification_recorded

logger = get_logger()


class NotificationDispatcher:
    """Records notifications inside the caller's transaction.

    Each notification is written under its own SAVEPOINT so a failure only
    discards the notification, never the state transition that triggered it.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def notify(
        self,
        recipient_id: int,
        notification_type: NotificationType,
        title: str,
        *,
        reference_id: int | None = None,
        reference_type: str | None = PROJECT_REFERENCE,
        body: str | None = None,
    ) -> Notification | None:
        notification = Notification(
            user_id=recipient_id,
            type=notification_type,
            title=title[:200],
            body=body,
            reference_id=reference_id,
            reference_type=reference_type,
            is_read=False,
        )
        try:
            with self.session.begin_nested():
                self.session.add(notification)
        except SQLAlchemyError as exc:
            logger.warning(
                "notification_dispatch_failed",
                recipient_id=recipient_id,
                notification_type=notification_type.value,
                reference_id=reference_id,
                error=str(exc),
            )
            record_notification_failed(notification_type.value)
            return None

        record_notification_recorded(notification_type.value)
        logger.info(
            "notification_recorded",
            recipient_id=recipient_id,
            notification_type=notification_type.value,
            reference_id=reference_id,
        )
        return notification


class NotificationService:
    def __init__(self, session: Session, actor: User) -> None:
        self.session = session
        self.actor = actor

    def list_notifications(self, *, page: int, page_size: int) -> tuple[list[Notification], int]:
        base = select(Notification).where(Notification.user_id == self.actor.id)
        total = self.session.execute(select(func.count()).select_from(base.subquery())).scalar_one()
        stmt = (
            base.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(self.session.execute(stmt).scalars().all()), total

    def unread_count(self) -> int:
        stmt = select(func.count()).where(
            Notification.user_id == self.actor.id,
            Notification.is_read.is_(False),
        )
        return self.session.execute(stmt).scalar_one()

    def mark_read(self, notification_id: int) -> Notification:
        notification = self.session.get(Notification, notification_id)
        if notification is None or notification.user_id != self.actor.id:
            raise not_found("Notification not found")
        if not notification.is_read:
            notification.is_read = True
            self.session.commit()
        return notification

    def mark_all_read(self) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == self.actor.id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        self.session.commit()
        logger.info("notifications_marked_read", user_id=self.actor.id, updated=result.rowcount)
        return result.rowcount
