from __future__ import annotations

from app.models.notification import NotificationType
from app.schemas.common import IdentifierModel


class NotificationRead(IdentifierModel):
    type: NotificationType
    title: str
    body: str | None = None
    reference_id: int | None = None
    reference_type: str | None = None
    is_read: bool
