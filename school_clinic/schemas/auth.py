"""Authentication-related Pydantic schemas."""

from pydantic import BaseModel, Field

from school_clinic.db.enums import Role


class LoginRequest(BaseModel):
    """Credentials for POST /api/auth/login."""
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=200)


class SessionUser(BaseModel):
    """Identity carried in the session token and login response."""
    id: int
    username: str
    role: Role


class LoginResponse(BaseModel):
    token: str
    user: SessionUser


class TokenPayload(BaseModel):
    """Decoded JWT payload structure."""
    sub: str  # user id
    username: str
    role: str


class UserSession(BaseModel):
    """
    Resolved identity for a request.

    Returned by the get_current_session dependency and passed to services
    as the acting user for audit entries.
    """
    user_id: int
    username: str
    role: Role
