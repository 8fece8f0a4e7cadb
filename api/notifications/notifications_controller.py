from sqlalchemy.orm import Session
from typing import List

from api.notifications.notifications_schema import NotificationRead
from api.notifications.notifications_service import list_notifications, mark_notification_read


def fetch_notifications(
    db: Session,
    user_id: str,
    page: int = 1,
    limit: int = 10,
    unread_only: bool = False,
) -> List[NotificationRead]:
    notifications = list_notifications(db, user_id, unread_only=unread_only, page=page, limit=limit)
    return [NotificationRead.model_validate(n) for n in notifications]


def mark_read_controller(db: Session, user_id: str, notification_id: int) -> NotificationRead:
    return NotificationRead.model_validate(mark_notification_read(db, user_id, notification_id))
