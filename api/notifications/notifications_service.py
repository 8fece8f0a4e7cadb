import logging
from typing import List

from blinker import signal
from sqlalchemy.orm import Session

from config.database import SessionLocal
from api.notifications.notifications_model import Notification
from utils.exceptions import RecordNotFound

logger = logging.getLogger(__name__)

# ------------------------------------------
# Define signals
# ------------------------------------------
record_submitted      = signal("record_submitted")
record_status_changed = signal("record_status_changed")

STATUS_MESSAGES = {
    "scheduled": "Your {label} pickup has been scheduled.",
    "completed": "Your {label} pickup is complete. Thank you!",
    "cancelled": "Your {label} request was cancelled and its {points} EcoPoints were reversed.",
}


def _label(kind: str) -> str:
    return "recycling" if kind == "waste" else "food donation"


def _store_notification(**fields) -> None:
    db: Session = SessionLocal()
    try:
        db.add(Notification(**fields))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to store notification for user %s", fields.get("user_id"))
    finally:
        db.close()


# ------------------------------------------
# Listener: Record Submitted
# ------------------------------------------
@record_submitted.connect
def on_record_submitted(sender, **kwargs):
    record = kwargs["record"]
    _store_notification(
        user_id=record.user_id,
        title="Pickup request received",
        body=(
            f"Your {_label(record.kind)} request is pending. "
            f"You earned {record.points_awarded} EcoPoints."
        ),
        type=record.kind,
        related_id=str(record.id),
        read=False,
    )


# ------------------------------------------
# Listener: Record Status Changed
# ------------------------------------------
@record_status_changed.connect
def on_record_status_changed(sender, **kwargs):
    record = kwargs["record"]
    template = STATUS_MESSAGES.get(record.status)
    if not template:
        return
    _store_notification(
        user_id=record.user_id,
        title=f"Request {record.status}",
        body=template.format(label=_label(record.kind), points=record.points_awarded),
        type=record.kind,
        related_id=str(record.id),
        read=False,
    )


def list_notifications(
    db: Session,
    user_id: str,
    unread_only: bool = False,
    page: int = 1,
    limit: int = 10,
) -> List[Notification]:
    offset = (page - 1) * limit
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.read.is_(False))
    return (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
             .offset(offset)
             .limit(limit)
             .all()
    )


def mark_notification_read(db: Session, user_id: str, notification_id: int) -> Notification:
    notification = (
        db.query(Notification)
          .filter(Notification.id == notification_id, Notification.user_id == user_id)
          .first()
    )
    if not notification:
        raise RecordNotFound("Notification not found")
    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification
