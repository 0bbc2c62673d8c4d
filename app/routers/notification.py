# app/routers/notification.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import desc

from app.database import get_db
from app.models import Notification
from app.schemas.common import Page
from app.schemas.notification import NotificationOut, NotificationMarkAllRead
from app.utils.auth import Actor, get_current_actor
from app.utils.dates import utcnow
from app.utils.errors import NotFound
from app.utils.pagination import PageParams, paginate

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=Page[NotificationOut])
def get_user_notifications(
    unread_only: bool = Query(False),
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Notifications for the current user, newest first"""
    query = db.query(Notification).filter(Notification.user_id == actor.id)
    if unread_only:
        query = query.filter(Notification.is_read == False)
    return paginate(query, params, order_by=desc(Notification.id))


@router.patch("/read-all", response_model=NotificationMarkAllRead)
def mark_all_as_read(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    updated = db.query(Notification).filter(
        Notification.user_id == actor.id,
        Notification.is_read == False
    ).update({"is_read": True, "read_at": utcnow()}, synchronize_session=False)
    db.commit()
    return {"message": f"Marked {updated} notifications as read", "updated": updated}


@router.patch("/{notification_id}/read", response_model=NotificationOut)
def mark_as_read(notification_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    # Other users' notifications are reported as missing
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == actor.id
    ).first()
    if not notification:
        raise NotFound("Notification not found")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utcnow()
        db.commit()
        db.refresh(notification)
    return notification
