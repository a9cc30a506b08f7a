"""School settings (singleton row)."""

import logging

from fastapi import Request
from sqlalchemy.orm import Session

from school_clinic.db.enums import AuditAction
from school_clinic.db.init_db import seed_settings_row
from school_clinic.db.models import SETTINGS_ROW_ID, ClinicSettings
from school_clinic.schemas.settings import SettingsUpdate
from school_clinic.services import audit_service

logger = logging.getLogger(__name__)

TABLE = ClinicSettings.__tablename__


def get_settings(db: Session) -> ClinicSettings:
    """
    Return the settings row.

    Read-only: when the row is missing an unsaved blank row is returned and
    the next update recreates it.
    """
    row = db.get(ClinicSettings, SETTINGS_ROW_ID)
    if row is None:
        return ClinicSettings(id=SETTINGS_ROW_ID, school_name="", supervisor_name="")
    return row


def update_settings(
    db: Session,
    data: SettingsUpdate,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> ClinicSettings:
    if seed_settings_row(db):
        logger.warning("Settings row was missing; recreated on update")
        db.flush()
    row = db.get(ClinicSettings, SETTINGS_ROW_ID)
    row.school_name = data.school_name
    row.supervisor_name = data.supervisor_name
    row.logo_path = data.logo_path
    row.daily_closing_time = data.daily_closing_time
    audit_service.log_event(
        db, AuditAction.UPDATE_SETTINGS, TABLE, record_id=row.id, actor_user_id=actor_user_id, request=request
    )
    db.commit()
    return row
