#taskflow/crud/analytics.py
from datetime import date, datetime, timezone
from sqlalchemy.orm import Session
from taskflow.models.project import Project
from taskflow.models.task import Task
from taskflow.models.user import User
from taskflow.core.constants import TaskPriority, TaskStatus
from taskflow.core.exceptions import UserNotFound
from taskflow.crud.project import get_project_progress
from taskflow.crud.task import get_task_stats
import calendar
import logging
from typing import List, Dict, Any, Optional, Tuple

logger = logging.getLogger("TaskFlow.Analytics")

RECENT_TASKS_LIMIT = 10
COMPLETED = TaskStatus.COMPLETED.value

def _start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

def _shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1

def _overdue(query, today: date):
    return query.filter(Task.due_date < today, Task.task_status != COMPLETED)

def get_dashboard(db: Session, user_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Workspace overview for the dashboard.

    Returns {"overview": {...counters}, "task_stats", "priority_stats",
    "project_stats" (projects with tasks, busiest first), "recent_tasks"}.
    """
    now = now or datetime.now(timezone.utc)
    month_start = _start_of_month(now)

    overview = {
        "total_users": db.query(User).filter(User.is_active == True).count(),  # noqa: E712
        "total_projects": db.query(Project).count(),
        "user_projects": db.query(Project).filter(Project.owner_id == user_id).count(),
        "total_tasks": db.query(Task).count(),
        "overdue_tasks": _overdue(db.query(Task), now.date()).count(),
        "tasks_this_month": db.query(Task).filter(Task.created_at >= month_start).count(),
        "tasks_completed_this_month": (
            db.query(Task)
            .filter(Task.task_status == COMPLETED, Task.completed_at >= month_start)
            .count()
        ),
    }
    stats = get_task_stats(db)
    project_stats = sorted(
        get_project_progress(db, with_tasks_only=True),
        key=lambda p: p["total_tasks"],
        reverse=True,
    )
    recent_tasks = (
        db.query(Task)
        .order_by(Task.updated_at.desc(), Task.id.desc())
        .limit(RECENT_TASKS_LIMIT)
        .all()
    )
    return {
        "overview": overview,
        "task_stats": stats["by_status"],
        "priority_stats": stats["by_priority"],
        "project_stats": project_stats,
        "recent_tasks": recent_tasks,
    }

def get_monthly_trends(db: Session, months: int = 6, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    Tasks created per calendar month over the last `months` months (current month included),
    and how many of those are completed. Months without tasks are reported as zeros.
    """
    now = now or datetime.now(timezone.utc)
    first_year, first_month = _shift_month(now.year, now.month, -(months - 1))
    window_start = datetime(first_year, first_month, 1, tzinfo=timezone.utc)

    buckets: Dict[Tuple[int, int], Dict[str, int]] = {}
    for created_at, task_status in (
        db.query(Task.created_at, Task.task_status).filter(Task.created_at >= window_start).all()
    ):
        bucket = buckets.setdefault((created_at.year, created_at.month), {"created": 0, "completed": 0})
        bucket["created"] += 1
        if task_status == COMPLETED:
            bucket["completed"] += 1

    trends = []
    for offset in range(months - 1, -1, -1):
        year, month = _shift_month(now.year, now.month, -offset)
        bucket = buckets.get((year, month), {"created": 0, "completed": 0})
        trends.append({
            "month": calendar.month_abbr[month],
            "year": year,
            "created": bucket["created"],
            "completed": bucket["completed"],
        })
    return trends

def get_user_analytics(db: Session, user_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Task counters and priority split for one assignee; raises UserNotFound.
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFound("User not found")
    today = (now or datetime.now(timezone.utc)).date()

    tasks = (
        db.query(Task)
        .filter(Task.assignee_id == user_id)
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )
    task_stats = {
        "total": len(tasks),
        "completed": sum(1 for t in tasks if t.task_status == COMPLETED),
        "in_progress": sum(1 for t in tasks if t.task_status == TaskStatus.IN_PROGRESS.value),
        "pending": sum(1 for t in tasks if t.task_status == TaskStatus.TODO.value),
        "overdue": sum(1 for t in tasks if t.due_date and t.due_date < today and t.task_status != COMPLETED),
    }
    priority_distribution = {
        priority.value: sum(1 for t in tasks if t.priority == priority.value)
        for priority in (TaskPriority.HIGH, TaskPriority.MEDIUM, TaskPriority.LOW)
    }
    logger.debug(f"Analytics for user {user_id}: {task_stats}")
    return {
        "user": user,
        "task_stats": task_stats,
        "priority_distribution": priority_distribution,
        "recent_tasks": tasks[:RECENT_TASKS_LIMIT],
    }
