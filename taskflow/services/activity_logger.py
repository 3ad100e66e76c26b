"""
Activity audit recorder.

One audit entry per significant mutation, with a human readable description
built from per-family templates. Recording is best-effort: nothing here raises
into the caller, failures end up in the operational log.

    log_task_activity(db, user.id, ActivityAction.TASK_CREATED, task, request=request)
"""
import logging
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from taskflow.core.constants import ActivityAction, EntityType, parse_enum
from taskflow.crud.activity_log import create_activity_log
from taskflow.models.activity_log import ActivityLog

logger = logging.getLogger("TaskFlow.ActivityLog")

COMMENT_NAME_LENGTH = 50
COMMENT_PREVIEW_LENGTH = 30
# matches ActivityLog.user_agent
USER_AGENT_MAX_LENGTH = 255

def _preview(text: Optional[str], length: int) -> str:
    text = text or ""
    return text[:length] + ("..." if len(text) > length else "")

def _value(action) -> str:
    return action.value if isinstance(action, ActivityAction) else str(action)

def extract_request_context(request=None) -> Tuple[Optional[str], Optional[str]]:
    """
    (ip_address, user_agent) of an incoming request; both None without one.
    """
    if request is None:
        return None, None
    client = getattr(request, "client", None)
    ip_address = client.host if client else None
    headers = getattr(request, "headers", None) or {}
    user_agent = headers.get("user-agent")
    if user_agent:
        user_agent = user_agent[:USER_AGENT_MAX_LENGTH]
    return ip_address, user_agent

# ==== Description templates ====

def describe_auth(action) -> str:
    action = _value(action)
    if action == ActivityAction.USER_LOGIN.value:
        return "User logged into the system"
    if action == ActivityAction.USER_LOGOUT.value:
        return "User logged out of the system"
    if action == ActivityAction.USER_REGISTER.value:
        return "New user registered in the system"
    return f"User authentication: {action}"

def describe_project(action, title: str) -> str:
    action = _value(action)
    verbs = {
        ActivityAction.PROJECT_CREATED.value: "Created",
        ActivityAction.PROJECT_UPDATED.value: "Updated",
        ActivityAction.PROJECT_DELETED.value: "Deleted",
    }
    if action in verbs:
        return f'{verbs[action]} project "{title}"'
    return f'Project action: {action} on "{title}"'

def describe_task(action, title: str, metadata: Optional[Dict[str, Any]] = None) -> str:
    action = _value(action)
    metadata = metadata or {}
    if action == ActivityAction.TASK_CREATED.value:
        return f'Created task "{title}"'
    if action == ActivityAction.TASK_UPDATED.value:
        return f'Updated task "{title}"'
    if action == ActivityAction.TASK_ASSIGNED.value:
        return f'Assigned task "{title}" to {metadata.get("assignee_name") or "a user"}'
    if action == ActivityAction.TASK_REASSIGNED.value:
        return f'Reassigned task "{title}" to {metadata.get("new_assignee_name") or "a different user"}'
    if action == ActivityAction.TASK_STATUS_CHANGED.value:
        return f'Changed status of task "{title}" to {metadata.get("new_status") or "unknown"}'
    if action == ActivityAction.TASK_COMPLETED.value:
        return f'Marked task "{title}" as completed'
    if action == ActivityAction.TASK_DELETED.value:
        return f'Deleted task "{title}"'
    return f'Task action: {action} on "{title}"'

def describe_comment(action, task_title: str, comment_text: str) -> str:
    action = _value(action)
    preview = _preview(comment_text, COMMENT_PREVIEW_LENGTH)
    if action == ActivityAction.TASK_COMMENTED.value:
        return f'Added comment on task "{task_title}": "{preview}"'
    if action == ActivityAction.COMMENT_UPDATED.value:
        return f'Updated comment on task "{task_title}": "{preview}"'
    if action == ActivityAction.COMMENT_DELETED.value:
        return f'Deleted comment on task "{task_title}"'
    return f'Comment action: {action} on task "{task_title}"'

def describe_team_member(action, name: str) -> str:
    action = _value(action)
    verbs = {
        ActivityAction.TEAM_MEMBER_ADDED.value: "Added",
        ActivityAction.TEAM_MEMBER_UPDATED.value: "Updated",
        ActivityAction.TEAM_MEMBER_REMOVED.value: "Removed",
    }
    if action in verbs:
        return f'{verbs[action]} team member "{name}"'
    return f'Team member action: {action} on "{name}"'

# ==== Recorder ====

def record_activity(
    db: Session,
    user_id: int,
    action,
    description: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    entity_name: Optional[str] = None,
    related_entity_type: Optional[str] = None,
    related_entity_id: Optional[int] = None,
    related_entity_name: Optional[str] = None,
    request=None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Optional[ActivityLog]:
    """
    Store one audit entry. Returns it, or None when the action is unknown or the write failed.
    """
    known = parse_enum(ActivityAction, action)
    if known is None:
        logger.warning(f"Dropping activity with unknown action '{action}' for user {user_id}")
        return None

    ip_address, user_agent = extract_request_context(request)
    data = {
        "user_id": user_id,
        "action": known.value,
        "description": description or f"{known.value} by user {user_id}",
        "entity_type": entity_type.value if isinstance(entity_type, EntityType) else entity_type,
        "entity_id": entity_id,
        "entity_name": entity_name,
        "related_entity_type": (
            related_entity_type.value if isinstance(related_entity_type, EntityType) else related_entity_type
        ),
        "related_entity_id": related_entity_id,
        "related_entity_name": related_entity_name,
        "details": metadata or {},
        "ip_address": ip_address,
        "user_agent": user_agent,
    }
    try:
        return create_activity_log(db, data)
    except Exception as e:
        db.rollback()
        logger.error(f"Error logging activity '{known.value}' for user {user_id}: {e}")
        return None

# ==== Family helpers ====

def log_auth_activity(db: Session, user_id: int, action, request=None, metadata=None) -> Optional[ActivityLog]:
    return record_activity(
        db, user_id, action,
        description=describe_auth(action),
        entity_type=EntityType.USER,
        entity_id=user_id,
        request=request,
        metadata=metadata,
    )

def log_project_activity(db: Session, user_id: int, action, project, request=None, metadata=None) -> Optional[ActivityLog]:
    return record_activity(
        db, user_id, action,
        description=describe_project(action, project.title),
        entity_type=EntityType.PROJECT,
        entity_id=project.id,
        entity_name=project.title,
        request=request,
        metadata=metadata,
    )

def log_task_activity(db: Session, user_id: int, action, task, request=None, metadata=None) -> Optional[ActivityLog]:
    """
    Task entry; the task's project, when it has one, becomes the related entity.
    """
    project = getattr(task, "project", None)
    project_id = getattr(task, "project_id", None)
    return record_activity(
        db, user_id, action,
        description=describe_task(action, task.title, metadata),
        entity_type=EntityType.TASK,
        entity_id=task.id,
        entity_name=task.title,
        related_entity_type=EntityType.PROJECT if project_id else None,
        related_entity_id=project_id,
        related_entity_name=project.title if project is not None else None,
        request=request,
        metadata=metadata,
    )

def log_comment_activity(db: Session, user_id: int, action, task, comment, request=None, metadata=None) -> Optional[ActivityLog]:
    return record_activity(
        db, user_id, action,
        description=describe_comment(action, task.title, comment.text),
        entity_type=EntityType.COMMENT,
        entity_id=comment.id,
        entity_name=_preview(comment.text, COMMENT_NAME_LENGTH),
        related_entity_type=EntityType.TASK,
        related_entity_id=task.id,
        related_entity_name=task.title,
        request=request,
        metadata=metadata,
    )

def log_team_member_activity(db: Session, user_id: int, action, member, request=None, metadata=None) -> Optional[ActivityLog]:
    return record_activity(
        db, user_id, action,
        description=describe_team_member(action, member.name),
        entity_type=EntityType.TEAM_MEMBER,
        entity_id=member.id,
        entity_name=member.name,
        request=request,
        metadata=metadata,
    )
