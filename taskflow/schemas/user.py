#taskflow/schemas/user.py
from pydantic import BaseModel, ConfigDict, Field, EmailStr, constr
from typing import Optional
from datetime import datetime

from taskflow.core.constants import UserRole

class UserBase(BaseModel):
    """
    UserBase — shared user fields (create/read).
    """
    name: constr(min_length=2, max_length=128) = Field(..., example="Jane Doe", description="Display name")
    email: EmailStr = Field(..., example="jane.doe@example.com", description="Unique email, used as login")
    company: Optional[str] = Field(None, example="Acme Inc.", description="Organization")
    phone: Optional[str] = Field(None, example="+1 555 0100")
    avatar: Optional[str] = Field(None, example="https://cdn.example.com/avatars/jane.jpg")

class UserCreate(UserBase):
    """
    UserCreate — registration payload (password required).
    """
    password: constr(min_length=6) = Field(..., example="StrongPassw0rd!", description="Raw password, hashed on save")
    role: UserRole = Field(UserRole.MEMBER, description="admin, manager or member")

class UserUpdate(BaseModel):
    """
    UserUpdate — profile update, every field optional. Passwords change via /auth/change-password.
    """
    name: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None

class UserRead(UserBase):
    """
    UserRead — user as returned by the API.
    """
    id: int
    role: str
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class UserShort(BaseModel):
    """
    UserShort — embedded reference to a user (name + email).
    """
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)
