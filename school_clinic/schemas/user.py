"""Pydantic schemas for user accounts."""

from datetime import datetime

from pydantic import BaseModel, Field

from school_clinic.db.enums import Role
from school_clinic.schemas.common import Flag, RequestModel, RequiredText


class UserCreate(RequestModel):
    username: RequiredText = Field(..., max_length=100)
    password: str = Field(..., min_length=1, max_length=200)
    role: Role


class UserUpdate(RequestModel):
    """Role and activation are the only editable account fields."""
    role: Role
    is_active: Flag


class PasswordReset(RequestModel):
    password: str = Field(..., min_length=1, max_length=200)


class UserRead(BaseModel):
    """Account as listed to administrators (never includes the hash)."""
    id: int
    username: str
    role: str
    is_active: bool
    failed_attempts: int
    last_login_at: datetime | None

    model_config = {"from_attributes": True}


class UserCreatedResponse(BaseModel):
    id: int
    username: str
    role: Role
