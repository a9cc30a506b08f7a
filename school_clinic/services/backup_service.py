"""Whole-database backup, restore and year-end reset.

Each operation is one transaction together with its audit row. Users and
audit logs are never exported, deleted or re-inserted.
"""

import logging

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_clinic.core.config import settings
from school_clinic.db.enums import AUDIT_TABLE_ALL, AuditAction
from school_clinic.db.models import (
    SETTINGS_ROW_ID,
    ClinicAppointment,
    ClinicSettings,
    DailyVisit,
    Referral,
    SpecialFollowUp,
    Student,
)
from school_clinic.schemas.backup import (
    ClinicAppointmentSnapshot,
    ReferralSnapshot,
    SettingsSnapshot,
    Snapshot,
    SpecialCaseSnapshot,
    StudentSnapshot,
    VisitSnapshot,
)
from school_clinic.services import audit_service

logger = logging.getLogger(__name__)

# Children before students so foreign keys hold at every step
YEARLY_TABLES_DELETE_ORDER = (ClinicAppointment, DailyVisit, SpecialFollowUp, Referral, Student)


def _delete_all(db: Session, models) -> dict[str, int]:
    counts = {}
    for model in models:
        counts[model.__tablename__] = db.query(model).delete()
    db.flush()
    return counts


def build_snapshot(
    db: Session,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> Snapshot:
    """
    Export settings and every operational table, rows in id order.

    clinic_appointments is included unless BACKUP_INCLUDE_CLINIC_APPOINTMENTS
    is off. Writes BACKUP_DATA.
    """
    settings_row = db.get(ClinicSettings, SETTINGS_ROW_ID)
    snapshot = Snapshot(
        settings=[SettingsSnapshot.model_validate(settings_row)] if settings_row else [],
        students=[
            StudentSnapshot.model_validate(row) for row in db.query(Student).order_by(Student.id)
        ],
        visits=[
            VisitSnapshot.model_validate(row) for row in db.query(DailyVisit).order_by(DailyVisit.id)
        ],
        special_cases=[
            SpecialCaseSnapshot.model_validate(row)
            for row in db.query(SpecialFollowUp).order_by(SpecialFollowUp.id)
        ],
        referrals=[
            ReferralSnapshot.model_validate(row) for row in db.query(Referral).order_by(Referral.id)
        ],
    )
    if settings.BACKUP_INCLUDE_CLINIC_APPOINTMENTS:
        snapshot.clinic_appointments = [
            ClinicAppointmentSnapshot.model_validate(row)
            for row in db.query(ClinicAppointment).order_by(ClinicAppointment.id)
        ]

    audit_service.log_event(
        db, AuditAction.BACKUP_DATA, AUDIT_TABLE_ALL, actor_user_id=actor_user_id, request=request
    )
    db.commit()
    return snapshot


def restore_snapshot(
    db: Session,
    snapshot: Snapshot,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> None:
    """
    Replace settings and all operational rows with the snapshot contents.

    Rows keep their snapshot ids. When the snapshot has no settings row an
    empty one is inserted. Any failure (bad reference, duplicate id, missing
    creator account) rolls the whole restore back.

    Raises:
        SQLAlchemyError: Store rejected the snapshot (nothing changed)
    """
    try:
        deleted = _delete_all(db, YEARLY_TABLES_DELETE_ORDER + (ClinicSettings,))

        if snapshot.settings:
            db.add(ClinicSettings(id=SETTINGS_ROW_ID, **snapshot.settings[0].model_dump()))
        else:
            db.add(ClinicSettings(id=SETTINGS_ROW_ID, school_name="", supervisor_name=""))
        db.flush()

        # Parents first; flush per table so the insert order follows the foreign keys
        batches = (
            (Student, snapshot.students),
            (DailyVisit, snapshot.visits),
            (SpecialFollowUp, snapshot.special_cases),
            (Referral, snapshot.referrals),
            (ClinicAppointment, snapshot.clinic_appointments or []),
        )
        for model, rows in batches:
            db.add_all(model(**row.model_dump()) for row in rows)
            db.flush()

        audit_service.log_event(
            db, AuditAction.RESTORE_DATA, AUDIT_TABLE_ALL, actor_user_id=actor_user_id, request=request
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Restore failed; previous data kept")
        raise

    logger.info(
        "Restore complete: replaced=%s students=%d visits=%d special_cases=%d referrals=%d",
        deleted,
        len(snapshot.students),
        len(snapshot.visits),
        len(snapshot.special_cases),
        len(snapshot.referrals),
    )


def reset_year(
    db: Session,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> dict[str, int]:
    """
    Year-end purge of students and all their records.

    Settings, users and the audit trail are kept. Running it on an already
    empty store succeeds and still writes RESET_NEW_YEAR.

    Returns:
        Deleted row count per table
    """
    try:
        deleted = _delete_all(db, YEARLY_TABLES_DELETE_ORDER)
        audit_service.log_event(
            db, AuditAction.RESET_NEW_YEAR, AUDIT_TABLE_ALL, actor_user_id=actor_user_id, request=request
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Year reset failed; nothing deleted")
        raise

    logger.info("Year reset complete: %s", deleted)
    return deleted
