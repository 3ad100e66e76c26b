#taskflow/schemas/activity_log.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Any, Dict
from datetime import datetime

from taskflow.schemas.response import Pagination
from taskflow.schemas.user import UserShort

class ActivityLogRead(BaseModel):
    """
    ActivityLogRead — one audit entry.
    """
    id: int
    user_id: int
    user: Optional[UserShort] = None
    action: str
    description: str
    entity_type: Optional[str] = None
    entity_id: Optional[int] = None
    entity_name: Optional[str] = None
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[int] = None
    related_entity_name: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict, serialization_alias="metadata")
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class ActivityLogList(BaseModel):
    activities: List[ActivityLogRead]
    pagination: Pagination

class ActivityStatsGroup(BaseModel):
    key: Optional[Any] = Field(None, description="Value of the grouping dimension")
    count: int
    latest_activity: Optional[datetime] = None

class ActivityStatsSummary(BaseModel):
    total_activities: int
    unique_users: int
    grouped_by: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class ActivityStats(BaseModel):
    stats: List[ActivityStatsGroup]
    summary: ActivityStatsSummary

class RecentActivity(BaseModel):
    activities: List[ActivityLogRead]
    count: int

class CleanupRequest(BaseModel):
    days_to_keep: Optional[int] = Field(None, ge=0, description="Retention window in days")

class CleanupResult(BaseModel):
    message: str
    deleted_count: int
