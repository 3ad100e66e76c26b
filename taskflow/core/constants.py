# taskflow/core/constants.py
from enum import Enum
from typing import Optional, Type, TypeVar

E = TypeVar("E", bound=Enum)

# === ROLES / TASK STATE ===

class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"

class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

class TeamMemberStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

# === NOTIFICATIONS ===

class NotificationType(str, Enum):
    TASK_ASSIGNED = "task_assigned"
    TASK_UPDATED = "task_updated"
    TASK_COMPLETED = "task_completed"
    TASK_REASSIGNED = "task_reassigned"
    COMMENT_ADDED = "comment_added"
    PROJECT_ASSIGNED = "project_assigned"

# === AUDIT TRAIL ===

class ActivityAction(str, Enum):
    USER_LOGIN = "user_login"
    USER_LOGOUT = "user_logout"
    USER_REGISTER = "user_register"
    PROJECT_CREATED = "project_created"
    PROJECT_UPDATED = "project_updated"
    PROJECT_DELETED = "project_deleted"
    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"
    TASK_ASSIGNED = "task_assigned"
    TASK_REASSIGNED = "task_reassigned"
    TASK_STATUS_CHANGED = "task_status_changed"
    TASK_COMPLETED = "task_completed"
    TASK_DELETED = "task_deleted"
    TASK_COMMENTED = "task_commented"
    COMMENT_UPDATED = "comment_updated"
    COMMENT_DELETED = "comment_deleted"
    TEAM_MEMBER_ADDED = "team_member_added"
    TEAM_MEMBER_UPDATED = "team_member_updated"
    TEAM_MEMBER_REMOVED = "team_member_removed"

class EntityType(str, Enum):
    USER = "user"
    PROJECT = "project"
    TASK = "task"
    COMMENT = "comment"
    TEAM_MEMBER = "team_member"

# Dimensions accepted by the activity stats aggregation
ACTIVITY_STATS_GROUPS = ("action", "entity_type", "user_id")

def parse_enum(enum_cls: Type[E], value) -> Optional[E]:
    """
    Convert a raw value into an enum member; None for unknown values.
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None
