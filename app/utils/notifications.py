# app/utils/notifications.py
"""
Notification sink: rows in the notifications table, pushed over WebSocket
to any connected recipient once the request has committed.
"""

import logging
from typing import List, Optional
from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from app.models.notification import Notification, NotificationType
from app.schemas.notification import NotificationOut
from app.services.websocket_manager import websocket_manager

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    user_id: str,
    message: str,
    notification_type: NotificationType = NotificationType.SYSTEM,
    link: Optional[str] = None,
) -> Notification:
    """
    Stage a notification for a user inside the caller's transaction

    Args:
        db: Database session
        user_id: Opaque id of the user to notify
        message: Notification message
        notification_type: Type of notification
        link: Client route the notification points at, e.g. '/tasks/123'

    Returns:
        The pending notification object
    """
    notification = Notification(
        user_id=user_id,
        type=NotificationType(notification_type).value,
        message=message,
        link=link,
        is_read=False,
    )
    db.add(notification)
    return notification


async def push_notification(user_id: str, payload: dict):
    try:
        await websocket_manager.send_notification_to_user(user_id, payload)
    except Exception as e:
        # Delivery is best effort; the row is already stored
        logger.error(f"Error pushing notification to user {user_id}: {e}")


class NotificationSink:
    """Collects notifications during a request and dispatches them after commit"""

    def __init__(self, db: Session, actor_id: Optional[str] = None):
        self.db = db
        self.actor_id = actor_id
        self.pending: List[Notification] = []

    def notify(self, user_id: Optional[str], notification_type: NotificationType, message: str, link: Optional[str] = None):
        # Nobody gets notified about their own actions
        if not user_id or user_id == self.actor_id:
            return None
        notification = create_notification(self.db, user_id, message, notification_type, link)
        self.pending.append(notification)
        return notification

    def notify_many(self, user_ids, notification_type: NotificationType, message: str, link: Optional[str] = None):
        for user_id in dict.fromkeys(user_ids):
            self.notify(user_id, notification_type, message, link)

    def dispatch(self, background_tasks: Optional[BackgroundTasks]):
        """Schedule WebSocket delivery; call only after the session has committed"""
        pending, self.pending = self.pending, []
        if background_tasks is None:
            return
        for notification in pending:
            payload = NotificationOut.model_validate(notification).model_dump(mode="json")
            background_tasks.add_task(push_notification, notification.user_id, payload)
