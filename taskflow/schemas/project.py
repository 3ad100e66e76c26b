#taskflow/schemas/project.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from taskflow.schemas.user import UserShort

class ProjectBase(BaseModel):
    """
    ProjectBase — shared project fields.
    """
    title: str = Field(..., example="Website relaunch", description="Project title")
    description: str = Field(..., example="Rebuild the marketing site", description="Description")

class ProjectCreate(ProjectBase):
    """
    ProjectCreate — owner defaults to the creating user.
    """
    owner_id: Optional[int] = Field(None, description="Owner (admins/managers may pick another user)")

class ProjectUpdate(BaseModel):
    """
    ProjectUpdate — every field optional; owner_id only honoured for admins/managers.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    owner_id: Optional[int] = None

class ProjectRead(ProjectBase):
    id: int
    owner_id: Optional[int] = None
    owner: Optional[UserShort] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class ProjectDetail(ProjectRead):
    """
    ProjectDetail — project with its task counters.
    """
    tasks_count: int = 0
    completed_tasks_count: int = 0

class ProjectProgress(BaseModel):
    """
    ProjectProgress — task totals of one project; completion_rate is a 0..1 fraction.
    """
    id: int
    title: str
    description: Optional[str] = None
    owner: Optional[str] = Field(None, description="Owner name")
    total_tasks: int
    completed_tasks: int
    completion_rate: float
    created_at: datetime

class ProjectStats(BaseModel):
    total_projects: int
    user_projects: int
    project_stats: List[ProjectProgress]
