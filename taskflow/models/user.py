#taskflow/models/user.py
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, func
)
from taskflow.models.base import Base, utcnow

class User(Base):
    """
    User — account of a person in the organization. Role drives permissions
    (admin, manager, member); accounts are deactivated, never hard-deleted.
    """
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)
    name: str = Column(String(128), nullable=False, doc="Display name")
    email: str = Column(String(255), unique=True, nullable=False, index=True, doc="Unique email, used as login")
    password_hash: str = Column(String(128), nullable=False, doc="bcrypt hash, never the raw password")
    role: str = Column(String(16), nullable=False, default="member", index=True, doc="admin, manager or member")
    company: str = Column(String(128), nullable=True, doc="Organization")
    phone: str = Column(String(32), nullable=True)
    avatar: str = Column(String(255), nullable=True, doc="Avatar URL")
    is_active: bool = Column(Boolean, default=True, nullable=False, doc="Account active")
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)
    last_login_at: datetime = Column(DateTime(timezone=True), nullable=True, doc="Last successful login")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"
