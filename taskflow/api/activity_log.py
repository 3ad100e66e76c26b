#taskflow/api/activity_log.py
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from taskflow.schemas.activity_log import (
    ActivityLogRead, ActivityLogList, ActivityStats, ActivityStatsSummary, RecentActivity,
    CleanupRequest, CleanupResult,
)
from taskflow.schemas.response import Pagination
from taskflow.crud.activity_log import (
    get_user_activity,
    get_system_activity,
    count_activity,
    get_activity_stats,
    get_recent_activity,
    cleanup_old_activity,
)
from taskflow.dependencies import get_db, get_current_active_user, require_roles
from taskflow.models.user import User as UserModel
from taskflow.core.constants import ActivityAction, EntityType, UserRole
from taskflow.core.settings import settings
from taskflow.core.exceptions import ActivityLogValidationError

logger = logging.getLogger("TaskFlow.ActivityLogAPI")

router = APIRouter(prefix="/activity-logs", tags=["Activity Logs"])

def _filters(action, entity_type, start_date, end_date) -> dict:
    return {
        "action": action.value if action else None,
        "entity_type": entity_type.value if entity_type else None,
        "start_date": start_date,
        "end_date": end_date,
    }

@router.get("/", response_model=ActivityLogList)
def list_system_activity(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.ACTIVITY_LOG_PAGE_SIZE, ge=1, le=200),
    user_id: Optional[int] = Query(None),
    action: Optional[ActivityAction] = Query(None),
    entity_type: Optional[EntityType] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(UserRole.ADMIN)),
):
    """
    Audit trail of every user (admin only).
    """
    filters = _filters(action, entity_type, start_date, end_date)
    filters["user_id"] = user_id
    skip = (page - 1) * limit
    activities = get_system_activity(db, filters, skip=skip, limit=limit)
    total = count_activity(db, filters)
    return ActivityLogList(
        activities=[ActivityLogRead.model_validate(a) for a in activities],
        pagination=Pagination.build(page, limit, total, len(activities)),
    )

@router.get("/my-activity", response_model=ActivityLogList)
def list_my_activity(
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1, le=200),
    action: Optional[ActivityAction] = Query(None),
    entity_type: Optional[EntityType] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    filters = _filters(action, entity_type, start_date, end_date)
    skip = (page - 1) * limit
    activities = get_user_activity(db, current_user.id, filters, skip=skip, limit=limit)
    total = count_activity(db, filters, user_id=current_user.id)
    return ActivityLogList(
        activities=[ActivityLogRead.model_validate(a) for a in activities],
        pagination=Pagination.build(page, limit, total, len(activities)),
    )

@router.get("/stats", response_model=ActivityStats)
def activity_stats(
    group_by: str = Query("action", description="action, entity_type or user_id"),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(UserRole.ADMIN)),
):
    try:
        result = get_activity_stats(db, group_by, start_date, end_date)
    except ActivityLogValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ActivityStats(
        stats=result["stats"],
        summary=ActivityStatsSummary(
            total_activities=result["total_activities"],
            unique_users=result["unique_users"],
            grouped_by=group_by,
            start_date=start_date,
            end_date=end_date,
        ),
    )

@router.get("/recent", response_model=RecentActivity)
def recent_activity(
    limit: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(UserRole.ADMIN, UserRole.MANAGER)),
):
    """
    System activity of the last 24 hours.
    """
    activities = get_recent_activity(db, hours=24, limit=limit)
    return RecentActivity(activities=[ActivityLogRead.model_validate(a) for a in activities], count=len(activities))

@router.delete("/cleanup", response_model=CleanupResult)
def cleanup_activity(
    data: Optional[CleanupRequest] = None,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(UserRole.ADMIN)),
):
    days_to_keep = settings.ACTIVITY_LOG_RETENTION_DAYS
    if data and data.days_to_keep is not None:
        days_to_keep = data.days_to_keep
    try:
        deleted = cleanup_old_activity(db, days_to_keep)
    except ActivityLogValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    logger.info(f"User {current_user.id} cleaned up {deleted} activity entries")
    return CleanupResult(
        message=f"Cleaned up activity logs older than {days_to_keep} days",
        deleted_count=deleted,
    )
