#taskflow/api/task.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional

from taskflow.schemas.task import (
    TaskCreate, TaskRead, TaskUpdate, TaskDetail, TaskList, TaskStatusUpdate, TaskStats,
    CommentCreate, CommentRead, CommentList,
)
from taskflow.schemas.response import Pagination, SimpleMessage
from taskflow.crud.task import (
    create_task,
    get_task,
    get_tasks,
    get_tasks_for_assignee,
    get_task_stats,
    snapshot_task,
    update_task,
    update_task_status,
    delete_task,
    get_comments,
    add_comment,
    update_comment,
    delete_comment,
)
from taskflow.services import task_events
from taskflow.dependencies import get_db, get_current_active_user, require_roles
from taskflow.models.user import User as UserModel
from taskflow.core.constants import TaskPriority, TaskStatus, UserRole
from taskflow.core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    TaskValidationError,
    CommentValidationError,
)

logger = logging.getLogger("TaskFlow.TasksAPI")

router = APIRouter(prefix="/tasks", tags=["Tasks"])

@router.get("/", response_model=TaskList)
def list_tasks(
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = Query(None),
    assignee_id: Optional[int] = Query(None),
    project_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """
    Tasks with filters, sorting and pagination.
    """
    filters = {
        "task_status": task_status.value if task_status else None,
        "priority": priority.value if priority else None,
        "assignee_id": assignee_id,
        "project_id": project_id,
    }
    result = get_tasks(db, filters, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
    return TaskList(
        tasks=[TaskRead.model_validate(t) for t in result["tasks"]],
        pagination=Pagination.build(page, limit, result["total_count"], len(result["tasks"])),
    )

@router.get("/my-tasks", response_model=List[TaskRead])
def list_my_tasks(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    return get_tasks_for_assignee(db, current_user.id)

@router.get("/stats/overview", response_model=TaskStats)
def task_stats_overview(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    return get_task_stats(db)

@router.get("/{task_id}", response_model=TaskDetail)
def get_one_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    try:
        return get_task(db, task_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

@router.post("/", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_new_task(
    data: TaskCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(UserRole.ADMIN, UserRole.MANAGER)),
):
    """
    Create a task; the assignee is notified and the assignment is audited.
    """
    try:
        task = create_task(db, data.model_dump(), created_by_id=current_user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except TaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating task: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error creating task")

    task_events.on_task_created(db, current_user, task, request=request)
    return task

@router.put("/{task_id}", response_model=TaskRead)
def update_one_task(
    task_id: int,
    data: TaskUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(UserRole.ADMIN, UserRole.MANAGER)),
):
    payload = data.model_dump(exclude_unset=True)
    try:
        before = snapshot_task(get_task(db, task_id))
        task = update_task(db, task_id, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except TaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating task {task_id}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error updating task")

    task_events.on_task_updated(db, current_user, task, before, sorted(payload.keys()), request=request)
    return task

@router.patch("/{task_id}/status", response_model=TaskRead)
def change_task_status(
    task_id: int,
    data: TaskStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """
    Status-only update, open to every authenticated user (assignees move their own tasks).
    """
    try:
        before = snapshot_task(get_task(db, task_id))
        task = update_task_status(db, task_id, data.task_status)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except TaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    task_events.on_task_status_changed(db, current_user, task, before, request=request)
    return task

@router.delete("/{task_id}", response_model=SimpleMessage)
def delete_one_task(
    task_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(UserRole.ADMIN)),
):
    try:
        task_ref = task_events.task_reference(get_task(db, task_id))
        delete_task(db, task_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except TaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    task_events.on_task_deleted(db, current_user, task_ref, request=request)
    return SimpleMessage(message="Task deleted successfully")

# ==== Comments ====

@router.get("/{task_id}/comments", response_model=CommentList)
def list_task_comments(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    try:
        task = get_task(db, task_id)
        comments = get_comments(db, task_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return CommentList(task_title=task.title, comments=[CommentRead.model_validate(c) for c in comments], count=len(comments))

@router.post("/{task_id}/comments", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
def add_task_comment(
    task_id: int,
    data: CommentCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """
    Add a comment; assignee, creator and earlier commenters are notified.
    """
    try:
        comment = add_comment(db, task_id, current_user.id, data.text)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    except CommentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    task_events.on_comment_added(db, current_user, comment.task, comment, request=request)
    return comment

@router.put("/{task_id}/comments/{comment_id}", response_model=CommentRead)
def edit_task_comment(
    task_id: int,
    comment_id: int,
    data: CommentCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    try:
        comment = update_comment(db, task_id, comment_id, current_user, data.text)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except CommentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    task_events.on_comment_updated(db, current_user, comment.task, comment, request=request)
    return comment

@router.delete("/{task_id}/comments/{comment_id}", response_model=SimpleMessage)
def delete_task_comment(
    task_id: int,
    comment_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    try:
        task = get_task(db, task_id)
        comment = delete_comment(db, task_id, comment_id, current_user)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except CommentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    task_events.on_comment_deleted(db, current_user, task, comment, request=request)
    return SimpleMessage(message="Comment deleted successfully")
