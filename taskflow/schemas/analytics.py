#taskflow/schemas/analytics.py
from pydantic import BaseModel, Field
from typing import Dict, List

from taskflow.schemas.project import ProjectProgress
from taskflow.schemas.task import TaskRead
from taskflow.schemas.user import UserRead

class DashboardOverview(BaseModel):
    total_users: int = Field(..., description="Active users")
    total_projects: int
    user_projects: int = Field(..., description="Projects owned by the caller")
    total_tasks: int
    overdue_tasks: int
    tasks_this_month: int
    tasks_completed_this_month: int

class DashboardAnalytics(BaseModel):
    """
    DashboardAnalytics — counters, status/priority split, per-project progress and recent tasks.
    """
    overview: DashboardOverview
    task_stats: Dict[str, int]
    priority_stats: Dict[str, int]
    project_stats: List[ProjectProgress]
    recent_tasks: List[TaskRead]

class MonthlyTrend(BaseModel):
    month: str = Field(..., example="Jan")
    year: int
    created: int
    completed: int

class UserTaskStats(BaseModel):
    total: int
    completed: int
    in_progress: int
    pending: int
    overdue: int

class UserAnalytics(BaseModel):
    user: UserRead
    task_stats: UserTaskStats
    priority_distribution: Dict[str, int]
    recent_tasks: List[TaskRead]
