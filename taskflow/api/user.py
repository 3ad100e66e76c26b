#taskflow/api/user.py
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from taskflow.schemas.user import UserRead
from taskflow.crud.user import get_user, get_users
from taskflow.dependencies import get_db, get_current_active_user
from taskflow.models.user import User as DBUser

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("/", response_model=List[UserRead])
def list_users(
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Substring of name or email"),
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_active_user)
):
    """
    Active users other than the caller (candidates for assignment and ownership).
    """
    filters = {"is_active": True}
    if role:
        filters["role"] = role
    if search:
        filters["search"] = search
    return get_users(db, filters=filters, exclude_user_id=current_user.id)

@router.get("/{user_id}", response_model=UserRead)
def get_user_profile(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_active_user)
):
    user = get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
