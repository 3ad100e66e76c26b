#taskflow/schemas/task.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import date, datetime

from taskflow.core.constants import TaskStatus, TaskPriority
from taskflow.schemas.response import Pagination
from taskflow.schemas.user import UserShort

class TaskBase(BaseModel):
    """
    TaskBase — shared task fields (create/read).
    """
    title: str = Field(..., example="Implement login page", description="Task title")
    description: str = Field(..., example="Detailed description", description="Description")
    assignee_id: int = Field(..., example=2, description="Assignee (user id)")
    project_id: Optional[int] = Field(None, example=1, description="Optional project")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="low, medium, high")
    due_date: Optional[date] = Field(None, example="2026-12-31", description="Due date")

class TaskCreate(TaskBase):
    """
    TaskCreate — new tasks always start in "todo".
    """
    pass

class TaskUpdate(BaseModel):
    """
    TaskUpdate — every field optional.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    assignee_id: Optional[int] = None
    project_id: Optional[int] = None
    task_status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None

class TaskStatusUpdate(BaseModel):
    task_status: TaskStatus = Field(..., example="in-progress")

class CommentCreate(BaseModel):
    text: str = Field(..., example="Looks good to me", description="Comment text")

class CommentRead(BaseModel):
    id: int
    task_id: int
    author_id: int
    author: Optional[UserShort] = None
    text: str
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)

class TaskRead(TaskBase):
    """
    TaskRead — full task as returned by the API.
    """
    id: int
    task_status: str
    priority: str
    created_by_id: int
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    assignee: Optional[UserShort] = None
    created_by: Optional[UserShort] = None

    model_config = ConfigDict(from_attributes=True)

class TaskDetail(TaskRead):
    comments: List[CommentRead] = Field(default_factory=list)

class TaskList(BaseModel):
    tasks: List[TaskRead]
    pagination: Pagination

class CommentList(BaseModel):
    task_title: str
    comments: List[CommentRead]
    count: int

class TaskStats(BaseModel):
    by_status: dict
    by_priority: dict
