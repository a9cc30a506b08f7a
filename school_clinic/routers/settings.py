"""Settings router - school settings, backup, restore and year-end reset."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_clinic.core.config import settings as app_settings
from school_clinic.core.deps import get_current_session, get_db, require_roles
from school_clinic.db.enums import ROLES_ADMIN_ONLY
from school_clinic.schemas.auth import UserSession
from school_clinic.schemas.backup import Snapshot
from school_clinic.schemas.common import SuccessResponse
from school_clinic.schemas.settings import SettingsRead, SettingsUpdate
from school_clinic.services import backup_service, settings_service

router = APIRouter(prefix="/settings", tags=["Settings"])

RESTORE_FAILED = "Restore failed. Check that the backup file is valid."
RESET_FAILED = "Year reset failed"


@router.get("", response_model=SettingsRead)
def get_settings(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return settings_service.get_settings(db)


@router.put("", response_model=SuccessResponse)
def update_settings(
    request: Request,
    data: SettingsUpdate,
    session: UserSession = Depends(require_roles(ROLES_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    settings_service.update_settings(db, data, actor_user_id=session.user_id, request=request)
    return SuccessResponse()


@router.get("/backup")
def backup(
    request: Request,
    session: UserSession = Depends(require_roles(ROLES_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    """Full snapshot of settings and operational tables (no users, no audit trail)."""
    snapshot = backup_service.build_snapshot(db, actor_user_id=session.user_id, request=request)
    exclude = None if app_settings.BACKUP_INCLUDE_CLINIC_APPOINTMENTS else {"clinic_appointments"}
    return snapshot.model_dump(mode="json", exclude=exclude)


@router.post("/restore", response_model=SuccessResponse)
def restore(
    request: Request,
    snapshot: Snapshot,
    session: UserSession = Depends(require_roles(ROLES_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    """Replace all operational data with a snapshot. All or nothing."""
    try:
        backup_service.restore_snapshot(
            db, snapshot, actor_user_id=session.user_id, request=request
        )
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail=RESTORE_FAILED)
    return SuccessResponse()


@router.delete("/reset-year", response_model=SuccessResponse)
def reset_year(
    request: Request,
    session: UserSession = Depends(require_roles(ROLES_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    """Delete all students and their records. Irreversible."""
    try:
        backup_service.reset_year(db, actor_user_id=session.user_id, request=request)
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail=RESET_FAILED)
    return SuccessResponse()
