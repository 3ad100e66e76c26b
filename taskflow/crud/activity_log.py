#taskflow/crud/activity_log.py
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import func
from taskflow.models.activity_log import ActivityLog
from taskflow.core.constants import ACTIVITY_STATS_GROUPS
from taskflow.core.exceptions import ActivityLogValidationError
import logging
from typing import List, Optional, Dict, Any

logger = logging.getLogger("TaskFlow.ActivityLog")

def create_activity_log(db: Session, data: dict) -> ActivityLog:
    entry = ActivityLog(
        user_id=data["user_id"],
        action=data["action"],
        description=data["description"],
        entity_type=data.get("entity_type"),
        entity_id=data.get("entity_id"),
        entity_name=data.get("entity_name"),
        related_entity_type=data.get("related_entity_type"),
        related_entity_id=data.get("related_entity_id"),
        related_entity_name=data.get("related_entity_name"),
        details=data.get("details") or {},
        ip_address=data.get("ip_address"),
        user_agent=data.get("user_agent"),
    )
    if data.get("created_at") is not None:
        entry.created_at = data["created_at"]
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry

def _apply_filters(query, filters: Optional[Dict[str, Any]] = None, user_id: Optional[int] = None):
    """
    Shared predicate of the list and count paths: user, action, entity_type, start_date..end_date.
    """
    filters = filters or {}
    if user_id is not None:
        query = query.filter(ActivityLog.user_id == user_id)
    if filters.get("action"):
        query = query.filter(ActivityLog.action == filters["action"])
    if filters.get("entity_type"):
        query = query.filter(ActivityLog.entity_type == filters["entity_type"])
    if filters.get("start_date"):
        query = query.filter(ActivityLog.created_at >= filters["start_date"])
    if filters.get("end_date"):
        query = query.filter(ActivityLog.created_at <= filters["end_date"])
    return query

def _page(query, skip: int, limit: int) -> List[ActivityLog]:
    return (
        query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .offset(max(skip, 0))
        .limit(max(limit, 1))
        .all()
    )

def get_user_activity(
    db: Session,
    user_id: int,
    filters: Optional[Dict[str, Any]] = None,
    skip: int = 0,
    limit: int = 50,
) -> List[ActivityLog]:
    """
    Activity of one user, newest first.
    """
    return _page(_apply_filters(db.query(ActivityLog), filters, user_id=user_id), skip, limit)

def get_system_activity(
    db: Session,
    filters: Optional[Dict[str, Any]] = None,
    skip: int = 0,
    limit: int = 50,
) -> List[ActivityLog]:
    """
    Activity of every user, newest first; filters may include user_id.
    """
    filters = filters or {}
    return _page(_apply_filters(db.query(ActivityLog), filters, user_id=filters.get("user_id")), skip, limit)

def count_activity(db: Session, filters: Optional[Dict[str, Any]] = None, user_id: Optional[int] = None) -> int:
    filters = filters or {}
    if user_id is None:
        user_id = filters.get("user_id")
    return _apply_filters(db.query(ActivityLog), filters, user_id=user_id).count()

def get_activity_stats(
    db: Session,
    group_by: str = "action",
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Aggregate activity by action, entity_type or user_id.

    Returns {"stats": [{"key", "count", "latest_activity"}, ...] sorted by count desc,
    "total_activities": n, "unique_users": m}.
    """
    if group_by not in ACTIVITY_STATS_GROUPS:
        raise ActivityLogValidationError(
            f"Invalid group_by '{group_by}'. Use one of: {', '.join(ACTIVITY_STATS_GROUPS)}"
        )
    filters = {"start_date": start_date, "end_date": end_date}
    column = getattr(ActivityLog, group_by)
    count_col = func.count(ActivityLog.id).label("count")

    rows = (
        _apply_filters(db.query(column, count_col, func.max(ActivityLog.created_at)), filters)
        .group_by(column)
        .order_by(count_col.desc(), column)
        .all()
    )
    total = _apply_filters(db.query(func.count(ActivityLog.id)), filters).scalar() or 0
    unique_users = _apply_filters(db.query(func.count(func.distinct(ActivityLog.user_id))), filters).scalar() or 0

    return {
        "stats": [
            {"key": key, "count": count, "latest_activity": latest}
            for key, count, latest in rows
        ],
        "total_activities": total,
        "unique_users": unique_users,
    }

def get_recent_activity(db: Session, hours: int = 24, limit: int = 20) -> List[ActivityLog]:
    since = datetime.now(timezone.utc) - timedelta(hours=hours)
    return _page(_apply_filters(db.query(ActivityLog), {"start_date": since}), 0, limit)

def cleanup_old_activity(db: Session, days_to_keep: int = 90) -> int:
    """
    Delete entries older than now - days_to_keep; returns the deleted count.
    """
    if days_to_keep < 0:
        raise ActivityLogValidationError("days_to_keep must be zero or positive.")
    cutoff = datetime.now(timezone.utc) - timedelta(days=days_to_keep)
    try:
        count = (
            db.query(ActivityLog)
            .filter(ActivityLog.created_at < cutoff)
            .delete(synchronize_session="fetch")
        )
        db.commit()
        logger.info(f"Cleaned up {count} activity log entries older than {days_to_keep} days")
        return count
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to clean up activity logs: {e}")
        raise ActivityLogValidationError("Database error while cleaning up activity logs.")
