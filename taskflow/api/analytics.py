#taskflow/api/analytics.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List
from taskflow.schemas.analytics import DashboardAnalytics, MonthlyTrend, UserAnalytics
from taskflow.crud.analytics import get_dashboard, get_monthly_trends, get_user_analytics
from taskflow.core.exceptions import UserNotFound
from taskflow.dependencies import get_db, get_current_active_user
from taskflow.models.user import User as DBUser
import logging

router = APIRouter(prefix="/analytics", tags=["Analytics"])
logger = logging.getLogger("TaskFlow.AnalyticsAPI")

@router.get("/dashboard", response_model=DashboardAnalytics)
def dashboard(
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_active_user)
):
    """
    Workspace counters, status and priority split, project progress and the latest task activity.
    """
    return get_dashboard(db, current_user.id)

@router.get("/monthly-trends", response_model=List[MonthlyTrend])
def monthly_trends(
    months: int = Query(6, ge=1, le=24),
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_active_user)
):
    return get_monthly_trends(db, months=months)

@router.get("/user/{user_id}", response_model=UserAnalytics)
def user_analytics(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_active_user)
):
    try:
        return get_user_analytics(db, user_id)
    except UserNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
