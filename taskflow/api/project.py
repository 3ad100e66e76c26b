#taskflow/api/project.py
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional
from taskflow.schemas.project import ProjectCreate, ProjectRead, ProjectUpdate, ProjectDetail, ProjectStats
from taskflow.schemas.task import TaskRead
from taskflow.schemas.response import SimpleMessage
from taskflow.crud.project import (
    create_project,
    get_project,
    get_all_projects,
    count_project_tasks,
    get_project_stats,
    update_project,
    delete_project,
)
from taskflow.crud.task import get_tasks_by_project
from taskflow.crud.user import get_user_or_404
from taskflow.core.constants import ActivityAction, TaskStatus, UserRole
from taskflow.core.exceptions import (
    ProjectNotFound,
    ProjectValidationError,
    ProjectHasTasksError,
    UserNotFound,
)
from taskflow.services.activity_logger import log_project_activity
from taskflow.dependencies import get_db, get_current_active_user, require_roles
from taskflow.models.user import User as DBUser
from taskflow.models.project import Project as ProjectModel

import logging

router = APIRouter(prefix="/projects", tags=["Projects"])
logger = logging.getLogger("TaskFlow.ProjectsAPI")

MANAGING_ROLES = (UserRole.ADMIN.value, UserRole.MANAGER.value)

def _get_project_or_404(db: Session, project_id: int) -> ProjectModel:
    try:
        return get_project(db, project_id)
    except ProjectNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_new_project(
    data: ProjectCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(require_roles(UserRole.ADMIN, UserRole.MANAGER))
):
    """
    Create a project; the owner defaults to the caller.
    """
    payload = data.model_dump()
    payload["owner_id"] = payload.get("owner_id") or current_user.id
    try:
        get_user_or_404(db, payload["owner_id"])
        project = create_project(db, payload)
    except UserNotFound as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ProjectValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error in create_new_project: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error creating project")

    log_project_activity(db, current_user.id, ActivityAction.PROJECT_CREATED, project, request=request, metadata={
        "owner_name": project.owner.name if project.owner else None,
        "description_length": len(project.description),
    })
    return project

@router.get("/", response_model=List[ProjectRead])
def list_projects(
    owner_id: Optional[int] = Query(None, alias="owner"),
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_active_user)
):
    filters = {"owner_id": owner_id} if owner_id is not None else {}
    return get_all_projects(db, filters=filters)

@router.get("/stats/overview", response_model=ProjectStats)
def project_stats_overview(
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_active_user)
):
    """
    Project counts plus per-project task progress.
    """
    return get_project_stats(db, current_user.id)

@router.get("/{project_id}", response_model=ProjectDetail)
def get_one_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_active_user)
):
    """
    Project with total and completed task counts.
    """
    project = _get_project_or_404(db, project_id)
    detail = ProjectDetail.model_validate(project)
    detail.tasks_count = count_project_tasks(db, project.id)
    detail.completed_tasks_count = count_project_tasks(db, project.id, TaskStatus.COMPLETED.value)
    return detail

@router.get("/{project_id}/tasks", response_model=List[TaskRead])
def list_project_tasks(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_active_user)
):
    project = _get_project_or_404(db, project_id)
    return get_tasks_by_project(db, project.id)

@router.put("/{project_id}", response_model=ProjectRead)
def update_one_project(
    project_id: int,
    data: ProjectUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_active_user)
):
    """
    Admins, managers and the owner may update; only admins/managers may hand the project to another owner.
    """
    project = _get_project_or_404(db, project_id)
    if current_user.role not in MANAGING_ROLES and project.owner_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only update projects you own or if you are admin/manager",
        )

    payload = data.model_dump(exclude_unset=True)
    if current_user.role not in MANAGING_ROLES:
        payload.pop("owner_id", None)
    try:
        if payload.get("owner_id") is not None:
            get_user_or_404(db, payload["owner_id"])
        project, updated_fields = update_project(db, project.id, payload)
    except UserNotFound as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ProjectValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update project {project_id}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error updating project")

    log_project_activity(db, current_user.id, ActivityAction.PROJECT_UPDATED, project, request=request, metadata={
        "updated_fields": updated_fields,
    })
    return project

@router.delete("/{project_id}", response_model=SimpleMessage)
def delete_one_project(
    project_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_active_user)
):
    """
    Admins and the owner may delete a project, and only while it has no tasks.
    """
    project = _get_project_or_404(db, project_id)
    if not current_user.is_admin and project.owner_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete projects you own or if you are admin",
        )
    try:
        project = delete_project(db, project.id)
    except ProjectHasTasksError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ProjectValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    log_project_activity(db, current_user.id, ActivityAction.PROJECT_DELETED, project, request=request)
    return SimpleMessage(message="Project deleted successfully")
