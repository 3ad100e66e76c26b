"""
Notification rule engine.

Builds and stores notifications for task and comment events. Every call is
best-effort: the triggering write has already been committed, so failures here
are logged and reported as ``None`` instead of being raised.
"""
import logging
from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from taskflow.core.constants import NotificationType, parse_enum
from taskflow.crud.notification import create_notification
from taskflow.models.notification import Notification
from taskflow.models.task import Task

logger = logging.getLogger("TaskFlow.Notifications")

COMMENT_PREVIEW_LENGTH = 50

def truncate_text(text: str, length: int) -> str:
    text = text or ""
    return text[:length] + "..." if len(text) > length else text

def build_task_notification_content(event_type, task_title: str) -> Tuple[str, str]:
    """
    (title, message) for a task event. Unknown types fall back to a generic update text.
    """
    event = parse_enum(NotificationType, event_type)
    if event == NotificationType.TASK_ASSIGNED:
        return "New Task Assigned", f'You have been assigned a new task: "{task_title}"'
    if event == NotificationType.TASK_UPDATED:
        return "Task Updated", f'Task "{task_title}" has been updated'
    if event == NotificationType.TASK_COMPLETED:
        return "Task Completed", f'Task "{task_title}" has been marked as completed'
    if event == NotificationType.TASK_REASSIGNED:
        return "Task Reassigned", f'You have been assigned to task: "{task_title}"'
    return "Task Notification", f'Task "{task_title}" has been updated'

def build_comment_notification_content(task_title: str, comment_text: str) -> Tuple[str, str]:
    preview = truncate_text(comment_text, COMMENT_PREVIEW_LENGTH)
    return "New Comment on Task", f'New comment on "{task_title}": "{preview}"'

def _store(db: Session, data: dict) -> Optional[Notification]:
    try:
        notification = create_notification(db, data)
        logger.info(
            f"Notification {notification.id} ({notification.type}) -> user {notification.recipient_id}"
        )
        return notification
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating {data.get('type')} notification for user {data.get('recipient_id')}: {e}")
        return None

def notify_task_event(
    db: Session,
    recipient_id: int,
    sender_id: int,
    task: Task,
    event_type=NotificationType.TASK_ASSIGNED,
) -> Optional[Notification]:
    """
    Notify one user about a task event.

    Returns the stored notification, or None when the recipient is the sender,
    the type is not a known notification type, or storing failed.
    """
    if recipient_id is None or recipient_id == sender_id:
        return None

    title, message = build_task_notification_content(event_type, task.title)
    event = parse_enum(NotificationType, event_type)
    if event is None:
        logger.warning(f"Dropping notification with unknown type '{event_type}' for task {task.id}")
        return None

    return _store(db, {
        "recipient_id": recipient_id,
        "sender_id": sender_id,
        "type": event.value,
        "title": title,
        "message": message,
        "related_task_id": task.id,
        "related_project_id": task.project_id,
    })

def notify_comment_event(
    db: Session,
    recipient_id: int,
    sender_id: int,
    task: Task,
    comment_text: str,
) -> Optional[Notification]:
    if recipient_id is None or recipient_id == sender_id:
        return None

    title, message = build_comment_notification_content(task.title, comment_text)
    return _store(db, {
        "recipient_id": recipient_id,
        "sender_id": sender_id,
        "type": NotificationType.COMMENT_ADDED.value,
        "title": title,
        "message": message,
        "related_task_id": task.id,
        "related_project_id": task.project_id,
    })

def notify_task_event_many(
    db: Session,
    recipient_ids: Iterable[int],
    sender_id: int,
    task: Task,
    event_type,
) -> List[Notification]:
    """Fan-out: one notification per recipient; returns only those actually stored."""
    notifications = []
    for recipient_id in recipient_ids:
        notification = notify_task_event(db, recipient_id, sender_id, task, event_type)
        if notification:
            notifications.append(notification)
    return notifications

def comment_recipients(task: Task, commenter_id: int) -> Set[int]:
    """
    Assignee, creator and every prior comment author, minus the commenter.
    """
    recipients = {task.assignee_id, task.created_by_id}
    recipients.update(comment.author_id for comment in task.comments)
    recipients.discard(None)
    recipients.discard(commenter_id)
    return recipients
