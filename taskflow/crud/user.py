#taskflow/crud/user.py
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from taskflow.models.user import User
from taskflow.core.constants import UserRole, parse_enum
from taskflow.core.exceptions import AuthError, UserValidationError, UserNotFound
from taskflow.core.security import hash_password, verify_password
import logging
from typing import Optional, List, Dict, Any

logger = logging.getLogger("TaskFlow.Users")

def create_user(db: Session, data: dict) -> User:
    """
    Register a user; email must be unique, password is stored as a bcrypt hash.
    """
    name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password")
    if not name or not email or not password:
        raise UserValidationError("Name, email and password are required.")

    role = parse_enum(UserRole, data.get("role") or UserRole.MEMBER)
    if role is None:
        raise UserValidationError(f"Invalid role: {data.get('role')}")

    if get_user_by_email(db, email):
        raise UserValidationError("User with this email already exists.")

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role.value,
        company=data.get("company"),
        phone=data.get("phone"),
        avatar=data.get("avatar"),
        is_active=data.get("is_active", True),
    )
    db.add(user)
    try:
        db.commit()
        db.refresh(user)
        logger.info(f"Created user {user.id} ({user.email}, role={user.role})")
        return user
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Integrity error while creating user: {e}")
        raise UserValidationError("User with this email already exists.")

def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

def get_user_or_404(db: Session, user_id: int) -> User:
    user = get_user(db, user_id)
    if not user:
        raise UserNotFound(f"User {user_id} not found.")
    return user

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()

def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """
    Return the user when the email/password pair matches, otherwise None.
    """
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user

def set_last_login(db: Session, user: User) -> User:
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    return user

def get_users(db: Session, filters: Optional[Dict[str, Any]] = None, exclude_user_id: Optional[int] = None) -> List[User]:
    """
    List users ordered by name; filters: is_active, role, search.
    """
    query = db.query(User)
    filters = filters or {}
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    if "is_active" in filters:
        query = query.filter(User.is_active == filters["is_active"])
    if "role" in filters:
        query = query.filter(User.role == filters["role"])
    if "search" in filters:
        val = f"%{filters['search']}%"
        query = query.filter(or_(User.name.ilike(val), User.email.ilike(val)))
    return query.order_by(User.name.asc()).all()

def update_user(db: Session, user_id: int, data: dict) -> User:
    """
    Update profile fields. Passwords go through change_password only.
    """
    user = get_user_or_404(db, user_id)
    for field in ["name", "company", "phone", "avatar"]:
        if field in data and data[field] is not None:
            setattr(user, field, data[field])
    if not (user.name or "").strip():
        raise UserValidationError("Name is required.")
    try:
        db.commit()
        db.refresh(user)
        logger.info(f"Updated user {user.id}")
        return user
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to update user {user_id}: {e}")
        raise UserValidationError("Database error while updating user.")

def change_password(db: Session, user_id: int, current_password: str, new_password: str) -> User:
    """
    Replace the password after checking the current one; AuthError on mismatch.
    """
    user = get_user_or_404(db, user_id)
    if not verify_password(current_password or "", user.password_hash):
        raise AuthError("Current password is incorrect")
    if not new_password or len(new_password) < 6:
        raise UserValidationError("New password must be at least 6 characters long")
    user.password_hash = hash_password(new_password)
    try:
        db.commit()
        logger.info(f"Password changed for user {user.id}")
        return user
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to change password for user {user_id}: {e}")
        raise UserValidationError("Database error while changing password.")
