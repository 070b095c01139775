# clinisync/auth/schemas.py

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, model_validator

from clinisync.models.models import UserRole


class UserResponse(BaseModel):
    """User info returned to clients. Never carries the password hash."""
    id: str
    username: str
    name: str
    email: EmailStr
    roles: List[UserRole]
    current_role: UserRole
    specialty: Optional[str] = None
    clinic_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8)
    confirm_password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1)
    email: EmailStr
    roles: List[UserRole] = Field(..., min_length=1)
    current_role: UserRole
    specialty: Optional[str] = None
    clinic_name: Optional[str] = None

    @model_validator(mode="after")
    def validate_registration(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        if self.current_role not in self.roles:
            raise ValueError("current_role must be one of roles")
        return self


class RegisterResponse(LoginResponse):
    message: str = "Account created successfully."


class SwitchRoleRequest(BaseModel):
    current_role: UserRole


class LogoutResponse(BaseModel):
    message: str = "Logged out successfully"
