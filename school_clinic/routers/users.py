"""Users router - account administration (Admin only)."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from school_clinic.core.deps import get_db, require_roles
from school_clinic.db.enums import ROLES_ADMIN_ONLY
from school_clinic.schemas.auth import UserSession
from school_clinic.schemas.common import SuccessResponse
from school_clinic.schemas.user import (
    PasswordReset,
    UserCreate,
    UserCreatedResponse,
    UserRead,
    UserUpdate,
)
from school_clinic.services import user_service
from school_clinic.services.errors import DuplicateError, LastAdminError, NotFoundError

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=list[UserRead])
def list_users(
    session: UserSession = Depends(require_roles(ROLES_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    return user_service.list_users(db)


@router.post("", response_model=UserCreatedResponse)
def create_user(
    request: Request,
    data: UserCreate,
    session: UserSession = Depends(require_roles(ROLES_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    try:
        user = user_service.create_user(db, data, actor_user_id=session.user_id, request=request)
    except DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return UserCreatedResponse(id=user.id, username=user.username, role=user.role)


@router.put("/{user_id}", response_model=SuccessResponse)
def update_user(
    user_id: int,
    request: Request,
    data: UserUpdate,
    session: UserSession = Depends(require_roles(ROLES_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    """Change role or (de)activate an account."""
    try:
        user_service.update_user(db, user_id, data, actor_user_id=session.user_id, request=request)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except LastAdminError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return SuccessResponse()


@router.put("/{user_id}/reset-password", response_model=SuccessResponse)
def reset_password(
    user_id: int,
    request: Request,
    data: PasswordReset,
    session: UserSession = Depends(require_roles(ROLES_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    """Set a new password; also clears the lockout counter."""
    try:
        user_service.reset_password(db, user_id, data, actor_user_id=session.user_id, request=request)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    return SuccessResponse()


@router.put("/{user_id}/unlock", response_model=SuccessResponse)
def unlock_user(
    user_id: int,
    request: Request,
    session: UserSession = Depends(require_roles(ROLES_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    """Clear the lockout counter without changing the password."""
    try:
        user_service.unlock_user(db, user_id, actor_user_id=session.user_id, request=request)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    return SuccessResponse()
