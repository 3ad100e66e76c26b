"""
Side effects of task and comment mutations.

Routers call these after the primary write has been committed. Each handler
decides who gets notified and which audit entry is written; both steps are
best-effort and never raise.
"""
import logging
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from taskflow.core.constants import ActivityAction, NotificationType, TaskStatus
from taskflow.models.notification import Notification
from taskflow.models.task import Task, TaskComment
from taskflow.models.user import User
from taskflow.services.activity_logger import log_comment_activity, log_task_activity
from taskflow.services.notifications import (
    comment_recipients,
    notify_comment_event,
    notify_task_event,
)

logger = logging.getLogger("TaskFlow.TaskEvents")

COMPLETED = TaskStatus.COMPLETED.value

def task_reference(task: Task) -> SimpleNamespace:
    """
    Detached copy of what the audit entry needs, taken before a task is deleted.
    """
    project = task.project
    return SimpleNamespace(
        id=task.id,
        title=task.title,
        project_id=task.project_id,
        project=SimpleNamespace(id=project.id, title=project.title) if project else None,
    )

def on_task_created(db: Session, actor: User, task: Task, request=None) -> List[Notification]:
    notifications = []
    notification = notify_task_event(db, task.assignee_id, actor.id, task, NotificationType.TASK_ASSIGNED)
    if notification:
        notifications.append(notification)

    log_task_activity(
        db, actor.id, ActivityAction.TASK_ASSIGNED, task, request=request,
        metadata={
            "priority": task.priority,
            "due_date": task.due_date.isoformat() if task.due_date else None,
            "project_name": task.project.title if task.project else None,
            "assignee_name": task.assignee.name if task.assignee else None,
        },
    )
    return notifications

def on_task_updated(
    db: Session,
    actor: User,
    task: Task,
    before: Dict[str, Any],
    updated_fields: Optional[List[str]] = None,
    request=None,
) -> List[Notification]:
    """
    Apply the update policy; the first matching rule wins:

    1. assignee changed            -> new assignee gets task_reassigned
    2. status moved into completed -> creator gets task_completed
    3. anything else               -> assignee gets task_updated

    The audit action follows the same precedence, with task_status_changed
    between completion and a plain update.
    """
    reassigned = task.assignee_id != before["assignee_id"]
    completed_now = task.task_status == COMPLETED and before["task_status"] != COMPLETED
    status_changed = task.task_status != before["task_status"]

    if reassigned:
        notification = notify_task_event(db, task.assignee_id, actor.id, task, NotificationType.TASK_REASSIGNED)
    elif completed_now:
        notification = notify_task_event(db, task.created_by_id, actor.id, task, NotificationType.TASK_COMPLETED)
    else:
        notification = notify_task_event(db, task.assignee_id, actor.id, task, NotificationType.TASK_UPDATED)

    metadata: Dict[str, Any] = {"updated_fields": list(updated_fields or [])}
    if reassigned:
        action = ActivityAction.TASK_REASSIGNED
        metadata["old_assignee_name"] = before.get("assignee_name")
        metadata["new_assignee_name"] = task.assignee.name if task.assignee else None
    elif completed_now:
        action = ActivityAction.TASK_COMPLETED
    elif status_changed:
        action = ActivityAction.TASK_STATUS_CHANGED
        metadata["old_status"] = before["task_status"]
        metadata["new_status"] = task.task_status
    else:
        action = ActivityAction.TASK_UPDATED
    log_task_activity(db, actor.id, action, task, request=request, metadata=metadata)

    logger.debug(f"Task {task.id} updated by user {actor.id}: {action.value}")
    return [notification] if notification else []

def on_task_status_changed(
    db: Session,
    actor: User,
    task: Task,
    before: Dict[str, Any],
    request=None,
) -> List[Notification]:
    """
    Status-only update; re-sending the current status is a no-op with no side effects.
    """
    if before["task_status"] == task.task_status:
        logger.debug(f"Task {task.id} status unchanged ({task.task_status}), nothing to dispatch")
        return []
    return on_task_updated(db, actor, task, before, ["task_status"], request=request)

def on_task_deleted(db: Session, actor: User, task_ref, request=None) -> None:
    log_task_activity(db, actor.id, ActivityAction.TASK_DELETED, task_ref, request=request)

def on_comment_added(
    db: Session,
    actor: User,
    task: Task,
    comment: TaskComment,
    request=None,
) -> List[Notification]:
    """
    Notify assignee, creator and previous commenters (once each, never the commenter).
    """
    notifications = []
    for recipient_id in sorted(comment_recipients(task, actor.id)):
        notification = notify_comment_event(db, recipient_id, actor.id, task, comment.text)
        if notification:
            notifications.append(notification)

    log_comment_activity(
        db, actor.id, ActivityAction.TASK_COMMENTED, task, comment, request=request,
        metadata={
            "comment_length": len(comment.text or ""),
            "task_assignee": task.assignee.name if task.assignee else None,
            "task_status": task.task_status,
        },
    )
    return notifications

def on_comment_updated(db: Session, actor: User, task: Task, comment: TaskComment, request=None) -> None:
    log_comment_activity(db, actor.id, ActivityAction.COMMENT_UPDATED, task, comment, request=request)

def on_comment_deleted(db: Session, actor: User, task: Task, comment: TaskComment, request=None) -> None:
    log_comment_activity(db, actor.id, ActivityAction.COMMENT_DELETED, task, comment, request=request)
