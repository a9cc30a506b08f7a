"""Login state machine and session issuance.

Checks run in a fixed order: existence, lockout, activation, password.
Every outcome writes one audit row. Refusals are committed before the
error is raised so the trail and the failed-attempt counter survive the
rejected request.
"""

import logging

from fastapi import Request
from sqlalchemy.orm import Session

from school_clinic.core.config import settings
from school_clinic.core.security import create_session_token, verify_password
from school_clinic.db.enums import AuditAction
from school_clinic.db.models import User
from school_clinic.schemas.auth import LoginResponse, SessionUser
from school_clinic.services import audit_service
from school_clinic.services.errors import AuthenticationError
from school_clinic.utils.datetime_parsing import clinic_now

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
ACCOUNT_LOCKED = "Account locked due to too many failed attempts"
ACCOUNT_INACTIVE = "Account is inactive"


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def is_locked(user: User) -> bool:
    return user.failed_attempts >= settings.LOGIN_LOCKOUT_THRESHOLD


def _refuse(
    db: Session,
    action: AuditAction,
    user: User | None,
    message: str,
    status_code: int,
    request: Request | None,
) -> AuthenticationError:
    user_id = user.id if user else None
    audit_service.log_event(
        db,
        action,
        User.__tablename__,
        record_id=user_id,
        actor_user_id=user_id,
        request=request,
    )
    db.commit()
    logger.info("Login refused: %s user_id=%s", action.value, user_id)
    return AuthenticationError(message, status_code=status_code)


def login(
    db: Session,
    username: str,
    password: str,
    request: Request | None = None,
) -> LoginResponse:
    """
    Authenticate a username/password pair.

    Returns:
        Session token and the public identity

    Raises:
        AuthenticationError: 401 for unknown user or wrong password,
            403 for a locked or inactive account
    """
    user = get_user_by_username(db, username)

    if not user:
        raise _refuse(
            db, AuditAction.LOGIN_FAILED_USER_NOT_FOUND, None, INVALID_CREDENTIALS, 401, request
        )

    # Lockout is checked before the password so a correct password cannot unlock
    if is_locked(user):
        raise _refuse(db, AuditAction.LOGIN_LOCKED, user, ACCOUNT_LOCKED, 403, request)

    if not user.is_active:
        raise _refuse(db, AuditAction.LOGIN_INACTIVE, user, ACCOUNT_INACTIVE, 403, request)

    if not verify_password(password, user.password_hash):
        user.failed_attempts = user.failed_attempts + 1
        raise _refuse(
            db, AuditAction.LOGIN_FAILED_WRONG_PASSWORD, user, INVALID_CREDENTIALS, 401, request
        )

    user.failed_attempts = 0
    user.last_login_at = clinic_now()
    audit_service.log_event(
        db,
        AuditAction.LOGIN_SUCCESS,
        User.__tablename__,
        record_id=user.id,
        actor_user_id=user.id,
        request=request,
    )
    db.commit()

    token = create_session_token(user.id, user.username, user.role)
    return LoginResponse(
        token=token,
        user=SessionUser(id=user.id, username=user.username, role=user.role),
    )
