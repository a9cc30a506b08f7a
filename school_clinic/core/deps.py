"""FastAPI dependencies for identity resolution, authorization, and database access."""

from typing import Generator

import jwt
from fastapi import Depends, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from school_clinic.core.config import settings
from school_clinic.core.security import decode_session_token
from school_clinic.db.session import SessionLocal


AUTH_HEADER = "Authorization"
BEARER_PREFIX = "Bearer "


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    Anything not committed by the handler is rolled back on close.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _single_user_identity(db: Session):
    """
    Fixed administrative identity used while SINGLE_USER_MODE is on.

    Stand-in for token verification: resolves to the seeded administrator,
    or to the first active Admin if that account was renamed, demoted or
    deactivated.
    """
    from school_clinic.db.enums import Role
    from school_clinic.db.models import User

    user = db.query(User).filter(User.username == settings.DEFAULT_ADMIN_USERNAME).first()
    if user and user.is_active and user.role == Role.ADMIN.value:
        return user
    return (
        db.query(User)
        .filter(User.role == Role.ADMIN.value, User.is_active.is_(True))
        .order_by(User.id)
        .first()
    )


def _token_identity(request: Request, db: Session):
    from school_clinic.db.models import User
    from school_clinic.schemas.auth import TokenPayload

    header = request.headers.get(AUTH_HEADER, "")
    if not header.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = TokenPayload.model_validate(decode_session_token(header[len(BEARER_PREFIX):]))
        user_id = int(payload.sub)
    except (jwt.InvalidTokenError, ValidationError, ValueError, TypeError):
        raise HTTPException(status_code=401, detail="Invalid session")

    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account disabled")
    return user


def get_current_session(
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Resolve the identity for a request.

    This is the PRIMARY auth dependency for every route except login.

    Raises:
        HTTPException 401: No identity could be resolved
        HTTPException 403: Stored role is not a known Role
    """
    from school_clinic.db.enums import Role
    from school_clinic.schemas.auth import UserSession

    if settings.SINGLE_USER_MODE:
        user = _single_user_identity(db)
        if not user:
            raise HTTPException(status_code=401, detail="No active administrator account")
    else:
        user = _token_identity(request, db)

    # Validate role is a known enum value - return 403 not 500
    if not Role.has_value(user.role):
        raise HTTPException(status_code=403, detail="Forbidden")

    return UserSession(user_id=user.id, username=user.username, role=Role(user.role))


def require_roles(allowed_roles: list):
    """
    Dependency factory for role-based authorization.

    Usage:
        @router.post("/", dependencies=[Depends(require_roles([Role.ADMIN]))])
    """
    def dependency(request: Request, db: Session = Depends(get_db)):
        session = get_current_session(request, db)
        if session.role not in allowed_roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return session
    return dependency
