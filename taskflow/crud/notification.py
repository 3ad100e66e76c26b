#taskflow/crud/notification.py
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from taskflow.models.notification import Notification
from taskflow.core.exceptions import NotificationNotFound, NotificationValidationError
import logging
from typing import List, Optional, Dict, Any

logger = logging.getLogger("TaskFlow.Notifications")

def create_notification(db: Session, data: dict) -> Notification:
    """
    Persist a notification; callers are expected to have validated the type already.
    """
    notification = Notification(
        recipient_id=data["recipient_id"],
        sender_id=data["sender_id"],
        type=data["type"],
        title=data["title"],
        message=data["message"],
        related_task_id=data.get("related_task_id"),
        related_project_id=data.get("related_project_id"),
        is_read=False,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification

def _recipient_query(db: Session, recipient_id: int, filters: Optional[Dict[str, Any]] = None):
    query = db.query(Notification).filter(Notification.recipient_id == recipient_id)
    filters = filters or {}
    if filters.get("unread_only"):
        query = query.filter(Notification.is_read == False)  # noqa: E712
    if filters.get("type"):
        query = query.filter(Notification.type == filters["type"])
    return query

def get_notifications(
    db: Session,
    recipient_id: int,
    filters: Optional[Dict[str, Any]] = None,
    page: int = 1,
    limit: int = 20,
) -> dict:
    """
    Page of a recipient's notifications, newest first.
    Returns {"notifications": [...], "total_count": n, "unread_count": m}.
    """
    query = _recipient_query(db, recipient_id, filters)
    total_count = query.count()
    if page < 1: page = 1
    if limit < 1: limit = 1
    notifications = (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "notifications": notifications,
        "total_count": total_count,
        "unread_count": get_unread_count(db, recipient_id),
    }

def get_unread_count(db: Session, recipient_id: int) -> int:
    return _recipient_query(db, recipient_id, {"unread_only": True}).count()

def get_notification(db: Session, notification_id: int, recipient_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.recipient_id == recipient_id)
        .first()
    )
    if not notification:
        raise NotificationNotFound("Notification not found")
    return notification

def mark_as_read(db: Session, notification_id: int, recipient_id: int) -> Notification:
    """
    Mark one notification read. Already-read notifications keep their original read_at.
    """
    notification = get_notification(db, notification_id, recipient_id)
    if notification.is_read:
        return notification
    notification.is_read = True
    notification.read_at = datetime.now(timezone.utc)
    try:
        db.commit()
        db.refresh(notification)
        return notification
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to mark notification {notification_id} as read: {e}")
        raise NotificationValidationError("Database error while updating notification.")

def mark_many_as_read(db: Session, recipient_id: int, notification_ids: Optional[List[int]] = None) -> int:
    """
    Mark the given (or, with no ids, all) unread notifications of a recipient as read.
    Returns the number of notifications modified.
    """
    query = _recipient_query(db, recipient_id, {"unread_only": True})
    if notification_ids:
        query = query.filter(Notification.id.in_(notification_ids))
    now = datetime.now(timezone.utc)
    try:
        count = query.update(
            {Notification.is_read: True, Notification.read_at: now, Notification.updated_at: now},
            synchronize_session="fetch",
        )
        db.commit()
        logger.info(f"Marked {count} notifications as read for user {recipient_id}")
        return count
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to mark notifications as read for user {recipient_id}: {e}")
        raise NotificationValidationError("Database error while updating notifications.")

def delete_notification(db: Session, notification_id: int, recipient_id: int) -> bool:
    notification = get_notification(db, notification_id, recipient_id)
    try:
        db.delete(notification)
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete notification {notification_id}: {e}")
        raise NotificationValidationError("Database error while deleting notification.")

def clear_read_notifications(db: Session, recipient_id: int) -> int:
    """
    Delete every read notification of a recipient; returns the deleted count.
    """
    try:
        count = (
            db.query(Notification)
            .filter(Notification.recipient_id == recipient_id, Notification.is_read == True)  # noqa: E712
            .delete(synchronize_session="fetch")
        )
        db.commit()
        logger.info(f"Cleared {count} read notifications for user {recipient_id}")
        return count
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to clear read notifications for user {recipient_id}: {e}")
        raise NotificationValidationError("Database error while clearing notifications.")
