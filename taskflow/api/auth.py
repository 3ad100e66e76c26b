#taskflow/api/auth.py
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from taskflow.schemas.auth import ChangePasswordRequest, LoginResponse
from taskflow.schemas.user import UserCreate, UserRead, UserUpdate
from taskflow.schemas.response import SimpleMessage
from taskflow.crud.user import (
    authenticate_user,
    change_password,
    create_user,
    set_last_login,
    update_user,
)
from taskflow.core.constants import ActivityAction, UserRole
from taskflow.core.exceptions import AuthError, UserValidationError
from taskflow.core.security import create_access_token
from taskflow.services.activity_logger import log_auth_activity
from taskflow.dependencies import get_db, get_current_active_user
from taskflow.models.user import User
from taskflow.core.settings import settings
from datetime import timedelta
import logging

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger("TaskFlow.Auth")

ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

def _issue_token(user: User) -> LoginResponse:
    access_token, _ = create_access_token(
        data={"sub": user.email, "user_id": user.id, "role": user.role},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return LoginResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserRead.model_validate(user),
    )

@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
def register(
    data: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Self-registration; new accounts always get the member role.
    """
    payload = data.model_dump()
    payload["role"] = UserRole.MEMBER
    try:
        user = create_user(db, payload)
    except UserValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error during registration: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error during registration")

    log_auth_activity(db, user.id, ActivityAction.USER_REGISTER, request=request, metadata={
        "email": user.email,
        "role": user.role,
        "company": user.company,
    })
    return _issue_token(user)

@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """
    Login with email (form field `username`) and password.
    """
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is deactivated")

    set_last_login(db, user)
    log_auth_activity(db, user.id, ActivityAction.USER_LOGIN, request=request, metadata={
        "email": user.email,
        "role": user.role,
    })
    return _issue_token(user)

@router.post("/logout", response_model=SimpleMessage, status_code=status.HTTP_200_OK)
def logout(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """
    Tokens are stateless; logout only leaves an audit entry.
    """
    log_auth_activity(db, current_user.id, ActivityAction.USER_LOGOUT, request=request)
    return SimpleMessage(message="Logout successful")

@router.get("/me", response_model=UserRead)
def get_me(current_user: User = Depends(get_current_active_user)):
    return current_user

@router.put("/me", response_model=UserRead)
def update_me(
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """
    Update own profile (name, company, phone, avatar).
    """
    try:
        return update_user(db, current_user.id, data.model_dump(exclude_unset=True))
    except UserValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/change-password", response_model=SimpleMessage)
def change_my_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """
    Change own password; the current password is required.
    """
    try:
        change_password(db, current_user.id, data.current_password, data.new_password)
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except UserValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return SimpleMessage(message="Password changed successfully")
