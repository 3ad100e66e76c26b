#taskflow/schemas/auth.py
from pydantic import BaseModel, Field, constr

from taskflow.schemas.user import UserRead

class LoginResponse(BaseModel):
    """
    LoginResponse — issued on successful login or registration.
    """
    access_token: str = Field(..., example="eyJhbGciOi...", description="JWT access token")
    token_type: str = Field("bearer", example="bearer")
    expires_in: int = Field(..., description="Access token lifetime (seconds)", example=3600)
    user: UserRead

class ChangePasswordRequest(BaseModel):
    """
    ChangePasswordRequest — the current password must match before the new one is stored.
    """
    current_password: str = Field(..., description="Password in use now")
    new_password: constr(min_length=6) = Field(..., example="N3wPassw0rd!", description="Replacement password")
