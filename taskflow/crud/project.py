# taskflow/crud/project.py
from sqlalchemy.orm import Session
from sqlalchemy import case, func
from taskflow.models.project import Project
from taskflow.models.task import Task
from taskflow.core.constants import TaskStatus
from taskflow.core.exceptions import (
    ProjectNotFound,
    ProjectValidationError,
    ProjectHasTasksError,
)
import logging
from typing import Optional, List, Dict, Any, Tuple

logger = logging.getLogger("TaskFlow.Projects")

def create_project(db: Session, data: dict) -> Project:
    """
    Create a project; title and description are required.
    """
    title = (data.get("title") or "").strip()
    description = (data.get("description") or "").strip()
    if not title or not description:
        raise ProjectValidationError("Please provide title and description.")

    project = Project(
        title=title,
        description=description,
        owner_id=data.get("owner_id"),
    )
    db.add(project)
    try:
        db.commit()
        db.refresh(project)
        logger.info(f"Created project '{project.title}' (ID: {project.id})")
        return project
    except Exception as e:
        db.rollback()
        logger.error(f"Exception during save: {e}")
        raise ProjectValidationError("Database error while creating project.")

def get_project(db: Session, project_id: int) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise ProjectNotFound(f"Project with id={project_id} not found.")
    return project

def get_all_projects(db: Session, filters: Optional[Dict[str, Any]] = None) -> List[Project]:
    """
    List projects newest first, optionally for a single owner.
    """
    query = db.query(Project)
    filters = filters or {}
    if "owner_id" in filters:
        query = query.filter(Project.owner_id == filters["owner_id"])
    return query.order_by(Project.created_at.desc(), Project.id.desc()).all()

def count_project_tasks(db: Session, project_id: int, task_status: Optional[str] = None) -> int:
    query = db.query(Task).filter(Task.project_id == project_id)
    if task_status:
        query = query.filter(Task.task_status == task_status)
    return query.count()

def update_project(db: Session, project_id: int, data: dict) -> Tuple[Project, List[str]]:
    """
    Update title/description/owner; returns (project, changed field names).
    """
    project = get_project(db, project_id)
    updated_fields = []
    for field in ["title", "description", "owner_id"]:
        if field in data and data[field] is not None:
            value = data[field].strip() if isinstance(data[field], str) else data[field]
            if getattr(project, field) != value:
                setattr(project, field, value)
                updated_fields.append(field)

    if not project.title:
        raise ProjectValidationError("Project title is required.")

    try:
        db.commit()
        db.refresh(project)
        if updated_fields:
            logger.info(f"Updated project {project.id} fields: {updated_fields}")
        else:
            logger.info(f"Update called but no changes for project {project.id}")
        return project, updated_fields
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to update project: {e}")
        raise ProjectValidationError("Database error while updating project.")

def delete_project(db: Session, project_id: int) -> Project:
    """
    Delete a project that has no tasks; raises ProjectHasTasksError otherwise.
    """
    project = get_project(db, project_id)
    if count_project_tasks(db, project_id) > 0:
        raise ProjectHasTasksError()
    try:
        db.delete(project)
        db.commit()
        logger.info(f"Deleted project {project_id}")
        return project
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to delete project {project_id}: {e}")
        raise ProjectValidationError("Database error while deleting project.")

def get_project_progress(db: Session, with_tasks_only: bool = False) -> List[Dict[str, Any]]:
    """
    Per-project task totals and completion rate (0..1), newest project first.
    """
    total = func.count(Task.id)
    completed = func.sum(case((Task.task_status == TaskStatus.COMPLETED.value, 1), else_=0))
    query = (
        db.query(Project, total.label("total_tasks"), completed.label("completed_tasks"))
        .outerjoin(Task, Task.project_id == Project.id)
        .group_by(Project.id)
    )
    if with_tasks_only:
        query = query.having(total > 0)
    rows = query.order_by(Project.created_at.desc(), Project.id.desc()).all()

    progress = []
    for project, total_tasks, completed_tasks in rows:
        completed_tasks = completed_tasks or 0
        progress.append({
            "id": project.id,
            "title": project.title,
            "description": project.description,
            "owner": project.owner.name if project.owner else None,
            "total_tasks": total_tasks,
            "completed_tasks": completed_tasks,
            "completion_rate": round(completed_tasks / total_tasks, 4) if total_tasks else 0.0,
            "created_at": project.created_at,
        })
    return progress

def get_project_stats(db: Session, user_id: int) -> Dict[str, Any]:
    return {
        "total_projects": db.query(Project).count(),
        "user_projects": db.query(Project).filter(Project.owner_id == user_id).count(),
        "project_stats": get_project_progress(db),
    }
