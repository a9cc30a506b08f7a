"""User account management (administrators only).

Accounts are never deleted; deactivation goes through update_user.
"""

from fastapi import Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from school_clinic.core.security import hash_password
from school_clinic.db.enums import AuditAction, Role
from school_clinic.db.models import User
from school_clinic.schemas.user import PasswordReset, UserCreate, UserUpdate
from school_clinic.services import audit_service
from school_clinic.services.errors import DuplicateError, LastAdminError, NotFoundError

TABLE = User.__tablename__


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.id).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError(f"User {user_id} not found")
    return user


def create_user(
    db: Session,
    data: UserCreate,
    *,
    actor_user_id: int | None,
    request: Request | None = None,
) -> User:
    """
    Create an account with a bcrypt-hashed password.

    Raises:
        DuplicateError: If the username is already taken
    """
    if db.query(User.id).filter(User.username == data.username).first():
        raise DuplicateError(f"Username '{data.username}' already exists")

    user = User(
        username=data.username,
        password_hash=hash_password(data.password),
        role=data.role.value,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise DuplicateError(f"Username '{data.username}' already exists")

    audit_service.log_event(
        db, AuditAction.CREATE_USER, TABLE, record_id=user.id, actor_user_id=actor_user_id, request=request
    )
    db.commit()
    db.refresh(user)
    return user


def _is_last_active_admin(db: Session, user: User) -> bool:
    if user.role != Role.ADMIN.value or not user.is_active:
        return False
    others = (
        db.query(User.id)
        .filter(User.role == Role.ADMIN.value, User.is_active.is_(True), User.id != user.id)
        .first()
    )
    return others is None


def update_user(
    db: Session,
    user_id: int,
    data: UserUpdate,
    *,
    actor_user_id: int | None,
    request: Request | None = None,
) -> User:
    """
    Change role and activation.

    Raises:
        NotFoundError: Unknown user id
        LastAdminError: Change would leave no active Admin account
    """
    user = get_user(db, user_id)
    keeps_admin = data.role == Role.ADMIN and data.is_active
    if not keeps_admin and _is_last_active_admin(db, user):
        raise LastAdminError("At least one active Admin account is required")

    user.role = data.role.value
    user.is_active = data.is_active
    audit_service.log_event(
        db, AuditAction.UPDATE_USER, TABLE, record_id=user.id, actor_user_id=actor_user_id, request=request
    )
    db.commit()
    return user


def reset_password(
    db: Session,
    user_id: int,
    data: PasswordReset,
    *,
    actor_user_id: int | None,
    request: Request | None = None,
) -> User:
    """Set a new password and clear the failed-attempt counter (unlocks the account)."""
    user = get_user(db, user_id)
    user.password_hash = hash_password(data.password)
    user.failed_attempts = 0
    audit_service.log_event(
        db, AuditAction.RESET_PASSWORD, TABLE, record_id=user.id, actor_user_id=actor_user_id, request=request
    )
    db.commit()
    return user


def unlock_user(
    db: Session,
    user_id: int,
    *,
    actor_user_id: int | None,
    request: Request | None = None,
) -> User:
    """Clear the failed-attempt counter, keeping the current password."""
    user = get_user(db, user_id)
    user.failed_attempts = 0
    audit_service.log_event(
        db, AuditAction.UPDATE_USER, TABLE, record_id=user.id, actor_user_id=actor_user_id, request=request
    )
    db.commit()
    return user
