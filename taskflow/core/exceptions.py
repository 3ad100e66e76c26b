# taskflow/core/exceptions.py

class BaseAppException(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str = "App exception"):
        super().__init__(message)

# ==== Validation ====

class ValidationError(BaseAppException):
    """Generic validation error."""
    def __init__(self, message: str = "Validation error"):
        super().__init__(message)

class UserValidationError(ValidationError):
    def __init__(self, message: str = "User validation error"):
        super().__init__(message)

class ProjectValidationError(ValidationError):
    def __init__(self, message: str = "Project validation error"):
        super().__init__(message)

class ProjectHasTasksError(ProjectValidationError):
    """Project still owns tasks and cannot be deleted."""
    def __init__(self, message: str = "Cannot delete project that has tasks. Please delete or reassign all tasks first."):
        super().__init__(message)

class TaskValidationError(ValidationError):
    def __init__(self, message: str = "Task validation error"):
        super().__init__(message)

class CommentValidationError(ValidationError):
    def __init__(self, message: str = "Comment validation error"):
        super().__init__(message)

class TeamMemberValidationError(ValidationError):
    def __init__(self, message: str = "Team member validation error"):
        super().__init__(message)

class NotificationValidationError(ValidationError):
    def __init__(self, message: str = "Notification validation error"):
        super().__init__(message)

class ActivityLogValidationError(ValidationError):
    def __init__(self, message: str = "Activity log validation error"):
        super().__init__(message)

# ==== NotFound ====

class NotFoundError(BaseAppException):
    """Requested resource does not exist."""
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)

class UserNotFound(NotFoundError):
    def __init__(self, message: str = "User not found"):
        super().__init__(message)

class ProjectNotFound(NotFoundError):
    def __init__(self, message: str = "Project not found"):
        super().__init__(message)

class TaskNotFound(NotFoundError):
    def __init__(self, message: str = "Task not found"):
        super().__init__(message)

class CommentNotFound(NotFoundError):
    def __init__(self, message: str = "Comment not found"):
        super().__init__(message)

class TeamMemberNotFound(NotFoundError):
    def __init__(self, message: str = "Team member not found"):
        super().__init__(message)

class NotificationNotFound(NotFoundError):
    def __init__(self, message: str = "Notification not found"):
        super().__init__(message)

# ==== Permissions / auth ====

class PermissionDeniedError(BaseAppException):
    """Caller is authenticated but not allowed to touch the resource."""
    def __init__(self, message: str = "Permission denied"):
        super().__init__(message)

class AuthError(BaseAppException):
    """Authentication or authorization error."""
    def __init__(self, message: str = "Authentication or authorization error"):
        super().__init__(message)
