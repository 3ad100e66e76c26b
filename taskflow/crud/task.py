#taskflow/crud/task.py
from datetime import date, datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import func
from taskflow.models.task import Task, TaskComment
from taskflow.models.user import User
from taskflow.core.constants import TaskStatus, TaskPriority, parse_enum
from taskflow.core.exceptions import (
    TaskNotFound,
    TaskValidationError,
    CommentNotFound,
    CommentValidationError,
    PermissionDeniedError,
    UserNotFound,
)
from taskflow.crud.project import get_project
import logging
from typing import List, Dict, Any, Optional

logger = logging.getLogger("TaskFlow.Tasks")

SORTABLE_FIELDS = {"created_at", "updated_at", "due_date", "priority", "task_status", "title"}

def _parse_due_date(value) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise TaskValidationError("Invalid due date format. Use YYYY-MM-DD.")

def _require_user(db: Session, user_id: int, label: str = "Assignee") -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFound(f"{label} not found")
    return user

def apply_status(task: Task, new_status: str) -> None:
    """
    Set the status and keep completed_at in step with it: stamped on the transition
    into "completed", cleared on any other status.
    """
    status = parse_enum(TaskStatus, new_status)
    if status is None:
        raise TaskValidationError("Valid status is required (todo, in-progress, completed)")
    if status == TaskStatus.COMPLETED:
        if task.task_status != TaskStatus.COMPLETED.value or task.completed_at is None:
            task.completed_at = datetime.now(timezone.utc)
    else:
        task.completed_at = None
    task.task_status = status.value

def snapshot_task(task: Task) -> Dict[str, Any]:
    """
    Plain copy of the fields the side-effect rules compare before/after an update.
    """
    return {
        "id": task.id,
        "title": task.title,
        "task_status": task.task_status,
        "assignee_id": task.assignee_id,
        "assignee_name": task.assignee.name if task.assignee else None,
        "created_by_id": task.created_by_id,
        "project_id": task.project_id,
    }

def create_task(db: Session, data: dict, created_by_id: int) -> Task:
    """
    Create a task in "todo" for the given creator.
    """
    title = (data.get("title") or "").strip()
    description = (data.get("description") or "").strip()
    if not title or not description:
        raise TaskValidationError("Title and description are required")

    assignee_id = data.get("assignee_id")
    if assignee_id is None:
        raise TaskValidationError("Assignee is required")
    _require_user(db, assignee_id)

    project_id = data.get("project_id")
    if project_id is not None:
        get_project(db, project_id)  # raises ProjectNotFound

    priority = parse_enum(TaskPriority, data.get("priority") or TaskPriority.MEDIUM)
    if priority is None:
        raise TaskValidationError("Priority must be one of: low, medium, high")

    task = Task(
        title=title,
        description=description,
        assignee_id=assignee_id,
        project_id=project_id,
        priority=priority.value,
        due_date=_parse_due_date(data.get("due_date")),
        created_by_id=created_by_id,
        task_status=TaskStatus.TODO.value,
    )
    db.add(task)
    try:
        db.commit()
        db.refresh(task)
        logger.info(f"Created task {task.id} (assignee={task.assignee_id}, project={task.project_id})")
        return task
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create task: {e}")
        raise TaskValidationError("Database error while creating task.")

def get_task(db: Session, task_id: int) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise TaskNotFound(f"Task {task_id} not found.")
    return task

def get_tasks(
    db: Session,
    filters: Optional[Dict[str, Any]] = None,
    page: int = 1,
    limit: int = 10,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> dict:
    """
    Filtered, sorted, paginated task list: {"tasks": [...], "total_count": n}.
    Filters: task_status, priority, assignee_id, project_id, created_by_id.
    """
    query = db.query(Task)
    filters = filters or {}
    for field in ("task_status", "priority", "assignee_id", "project_id", "created_by_id"):
        if filters.get(field) is not None:
            query = query.filter(getattr(Task, field) == filters[field])

    total_count = query.count()

    column = getattr(Task, sort_by) if sort_by in SORTABLE_FIELDS else Task.created_at
    if sort_order == "asc":
        query = query.order_by(column.asc(), Task.id.asc())
    else:
        query = query.order_by(column.desc(), Task.id.desc())

    if page < 1: page = 1
    if limit < 1: limit = 1
    tasks = query.offset((page - 1) * limit).limit(limit).all()
    return {"tasks": tasks, "total_count": total_count}

def get_tasks_by_project(db: Session, project_id: int) -> List[Task]:
    return (
        db.query(Task)
        .filter(Task.project_id == project_id)
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )

def get_tasks_for_assignee(db: Session, user_id: int) -> List[Task]:
    return (
        db.query(Task)
        .filter(Task.assignee_id == user_id)
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )

def update_task(db: Session, task_id: int, data: dict) -> Task:
    """
    Update a task. Status changes go through apply_status so completed_at stays consistent;
    an update without a status leaves completed_at untouched.
    """
    task = get_task(db, task_id)

    if data.get("assignee_id") is not None:
        _require_user(db, data["assignee_id"])
    if data.get("project_id") is not None:
        get_project(db, data["project_id"])

    for field in ["title", "description"]:
        if data.get(field) is not None:
            value = data[field].strip()
            if not value:
                raise TaskValidationError(f"Task {field} cannot be empty.")
            setattr(task, field, value)
    for field in ["assignee_id", "project_id"]:
        if data.get(field) is not None:
            setattr(task, field, data[field])
    if "due_date" in data:
        task.due_date = _parse_due_date(data["due_date"])
    if data.get("priority") is not None:
        priority = parse_enum(TaskPriority, data["priority"])
        if priority is None:
            raise TaskValidationError("Priority must be one of: low, medium, high")
        task.priority = priority.value
    if data.get("task_status") is not None:
        apply_status(task, data["task_status"])

    try:
        db.commit()
        db.refresh(task)
        logger.info(f"Updated task {task.id} fields: {sorted(k for k, v in data.items() if v is not None)}")
        return task
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update task: {e}")
        raise TaskValidationError("Database error while updating task.")

def update_task_status(db: Session, task_id: int, new_status: str) -> Task:
    task = get_task(db, task_id)
    apply_status(task, new_status)
    try:
        db.commit()
        db.refresh(task)
        logger.info(f"Task {task.id} status -> {task.task_status}")
        return task
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update task status: {e}")
        raise TaskValidationError("Database error while updating task status.")

def delete_task(db: Session, task_id: int) -> Task:
    """
    Hard-delete a task together with its comments; returns the deleted instance.
    """
    task = get_task(db, task_id)
    try:
        db.delete(task)
        db.commit()
        logger.info(f"Deleted task {task_id}")
        return task
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete task {task_id}: {e}")
        raise TaskValidationError("Database error while deleting task.")

def get_task_stats(db: Session) -> Dict[str, Dict[str, int]]:
    by_status = db.query(Task.task_status, func.count(Task.id)).group_by(Task.task_status).all()
    by_priority = db.query(Task.priority, func.count(Task.id)).group_by(Task.priority).all()
    return {
        "by_status": {status: count for status, count in by_status},
        "by_priority": {priority: count for priority, count in by_priority},
    }

# ==== Comments ====

def get_comments(db: Session, task_id: int) -> List[TaskComment]:
    """
    Comments of a task, newest first.
    """
    get_task(db, task_id)
    return (
        db.query(TaskComment)
        .filter(TaskComment.task_id == task_id)
        .order_by(TaskComment.timestamp.desc(), TaskComment.id.desc())
        .all()
    )

def get_comment(db: Session, task_id: int, comment_id: int) -> TaskComment:
    comment = (
        db.query(TaskComment)
        .filter(TaskComment.id == comment_id, TaskComment.task_id == task_id)
        .first()
    )
    if not comment:
        raise CommentNotFound(f"Comment {comment_id} not found on task {task_id}.")
    return comment

def add_comment(db: Session, task_id: int, author_id: int, text: str) -> TaskComment:
    text = (text or "").strip()
    if not text:
        raise CommentValidationError("Comment text is required")
    task = get_task(db, task_id)
    comment = TaskComment(author_id=author_id, text=text)
    task.comments.append(comment)
    try:
        db.commit()
        db.refresh(comment)
        logger.info(f"Added comment {comment.id} to task {task.id} by user {author_id}")
        return comment
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to add comment to task {task_id}: {e}")
        raise CommentValidationError("Database error while adding comment.")

def _check_comment_permission(comment: TaskComment, user: User, verb: str) -> None:
    if comment.author_id != user.id and not user.is_admin:
        raise PermissionDeniedError(f"You can only {verb} your own comments")

def update_comment(db: Session, task_id: int, comment_id: int, user: User, text: str) -> TaskComment:
    """
    Edit a comment (author or admin); the timestamp moves to the edit time.
    """
    text = (text or "").strip()
    if not text:
        raise CommentValidationError("Comment text is required")
    get_task(db, task_id)
    comment = get_comment(db, task_id, comment_id)
    _check_comment_permission(comment, user, "edit")
    comment.text = text
    comment.timestamp = datetime.now(timezone.utc)
    try:
        db.commit()
        db.refresh(comment)
        logger.info(f"Updated comment {comment.id} on task {task_id}")
        return comment
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update comment {comment_id}: {e}")
        raise CommentValidationError("Database error while updating comment.")

def delete_comment(db: Session, task_id: int, comment_id: int, user: User) -> TaskComment:
    task = get_task(db, task_id)
    comment = get_comment(db, task_id, comment_id)
    _check_comment_permission(comment, user, "delete")
    try:
        task.comments.remove(comment)
        db.commit()
        logger.info(f"Deleted comment {comment_id} from task {task_id}")
        return comment
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete comment {comment_id}: {e}")
        raise CommentValidationError("Database error while deleting comment.")
