# taskflow/dependencies.py

from typing import Generator
from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session
from taskflow.core.security import oauth2_scheme, verify_access_token
from taskflow.core.constants import UserRole
from taskflow.models.user import User
from taskflow.database import SessionLocal
from taskflow.crud.user import get_user_by_email

def get_db() -> Generator[Session, None, None]:
    """
    Yield a database session and close it once the request is done.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Decode the bearer token and load its user (the subject is the email).
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = verify_access_token(token)
    if payload is None:
        raise credentials_exception
    email: str | None = payload.get("sub")
    if email is None:
        raise credentials_exception
    user = get_user_by_email(db, email)
    if user is None:
        raise credentials_exception
    return user

def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")
    return current_user

def require_roles(*roles: UserRole):
    """
    Dependency factory: only users whose role is one of `roles` get through.

        current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.MANAGER))
    """
    allowed = {role.value for role in roles}

    def checker(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role {current_user.role} is not authorized to access this route",
            )
        return current_user

    return checker
