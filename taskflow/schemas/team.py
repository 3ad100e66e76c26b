#taskflow/schemas/team.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional
from datetime import date, datetime

from taskflow.core.constants import TeamMemberStatus

class TeamMemberBase(BaseModel):
    """
    TeamMemberBase — directory entry fields.
    """
    name: str = Field(..., example="John Smith")
    email: EmailStr = Field(..., example="john.smith@example.com")
    role: str = Field(..., example="Frontend Developer", description="Job role")
    department: str = Field(..., example="Engineering")
    joining_date: date = Field(..., example="2025-03-01")
    status: TeamMemberStatus = Field(TeamMemberStatus.ACTIVE)
    avatar: Optional[str] = None

class TeamMemberCreate(TeamMemberBase):
    pass

class TeamMemberUpdate(BaseModel):
    """
    TeamMemberUpdate — every field optional.
    """
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[str] = None
    department: Optional[str] = None
    joining_date: Optional[date] = None
    status: Optional[TeamMemberStatus] = None
    avatar: Optional[str] = None

class TeamMemberRead(TeamMemberBase):
    id: int
    status: str
    created_by_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class TeamCount(BaseModel):
    name: str
    count: int

class TeamStats(BaseModel):
    """
    TeamStats — headcount overview; role_stats counts active members only.
    """
    total_members: int
    active_members: int
    inactive_members: int
    department_stats: List[TeamCount]
    role_stats: List[TeamCount]
