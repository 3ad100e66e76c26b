from .user import User
from .project import Project
from .task import Task, TaskComment
from .team import TeamMember
from .notification import Notification
from .activity_log import ActivityLog
