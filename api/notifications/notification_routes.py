# api/notifications/notification_routes.py

from fastapi import APIRouter, Depends, Query
from typing import List
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from api.notifications.notifications_schema import NotificationRead
from api.notifications.notifications_controller import fetch_notifications, mark_read_controller

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "",
    response_model=List[NotificationRead],
    summary="Fetch paginated notifications for the authenticated user"
)
def get_user_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    unread_only: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    """
    Returns the paginated list of notifications for the logged-in user.
    """
    return fetch_notifications(db, current_user["id"], page=page, limit=limit, unread_only=unread_only)


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationRead,
    summary="Mark a notification as read"
)
def mark_notification_read_route(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    return mark_read_controller(db, current_user["id"], notification_id)
