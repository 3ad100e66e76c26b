#taskflow/api/notification.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from taskflow.schemas.notification import (
    NotificationRead, NotificationList, MarkReadRequest, BulkResult,
)
from taskflow.schemas.response import Pagination, SimpleMessage
from taskflow.crud.notification import (
    get_notifications,
    get_unread_count,
    mark_as_read,
    mark_many_as_read,
    delete_notification,
    clear_read_notifications,
)
from taskflow.dependencies import get_db, get_current_active_user
from taskflow.models.user import User as UserModel
from taskflow.core.constants import NotificationType
from taskflow.core.settings import settings
from taskflow.core.exceptions import NotificationNotFound, NotificationValidationError

logger = logging.getLogger("TaskFlow.NotificationsAPI")

router = APIRouter(prefix="/notifications", tags=["Notifications"])

@router.get("/", response_model=NotificationList)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.NOTIFICATION_PAGE_SIZE, ge=1, le=100),
    unread_only: bool = Query(False),
    notification_type: Optional[NotificationType] = Query(None, alias="type"),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """
    The caller's notifications, newest first, with the unread total.
    """
    filters = {
        "unread_only": unread_only,
        "type": notification_type.value if notification_type else None,
    }
    result = get_notifications(db, current_user.id, filters, page=page, limit=limit)
    return NotificationList(
        notifications=[NotificationRead.model_validate(n) for n in result["notifications"]],
        pagination=Pagination.build(page, limit, result["total_count"], len(result["notifications"])),
        unread_count=result["unread_count"],
    )

@router.get("/unread-count")
def unread_count(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    return {"unread_count": get_unread_count(db, current_user.id)}

@router.patch("/mark-all-read", response_model=BulkResult)
def mark_all_read(
    data: Optional[MarkReadRequest] = None,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """
    Mark the listed notifications (or all unread ones) as read.
    """
    ids = data.notification_ids if data else None
    try:
        count = mark_many_as_read(db, current_user.id, ids)
    except NotificationValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return BulkResult(message=f"{count} notifications marked as read", count=count)

@router.delete("/clear-read", response_model=BulkResult)
def clear_read(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    try:
        count = clear_read_notifications(db, current_user.id)
    except NotificationValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return BulkResult(message=f"{count} read notifications cleared", count=count)

@router.patch("/{notification_id}/read", response_model=NotificationRead)
def read_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    try:
        return mark_as_read(db, notification_id, current_user.id)
    except NotificationNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except NotificationValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{notification_id}", response_model=SimpleMessage)
def remove_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    try:
        delete_notification(db, notification_id, current_user.id)
    except NotificationNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except NotificationValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return SimpleMessage(message="Notification deleted successfully")
