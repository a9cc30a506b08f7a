"""Daily visit records."""

from datetime import date

from fastapi import Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from school_clinic.db.enums import AuditAction
from school_clinic.db.models import DailyVisit, Student, User
from school_clinic.schemas.visit import VisitCreate, VisitRead
from school_clinic.services import audit_service
from school_clinic.services.errors import NotFoundError, ReferentialIntegrityError
from school_clinic.services.record_query import (
    MISSING_REFERENCE,
    apply_datetime_range,
    apply_student_name_filter,
    column_values,
)
from school_clinic.utils.datetime_parsing import clinic_now

TABLE = DailyVisit.__tablename__


def list_visits(
    db: Session,
    student_name: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[VisitRead]:
    """Visits newest first, joined to the student and the creator's username."""
    query = (
        db.query(DailyVisit, Student.name, Student.grade, Student.phone, User.username)
        .join(DailyVisit.student)
        .outerjoin(DailyVisit.created_by)
    )
    query = apply_student_name_filter(query, student_name)
    query = apply_datetime_range(query, DailyVisit.occurred_at, start_date, end_date)
    rows = query.order_by(DailyVisit.occurred_at.desc(), DailyVisit.id.desc()).all()
    return [
        VisitRead(
            **column_values(visit),
            student_name=name,
            grade=grade,
            phone=phone,
            created_by=username,
        )
        for visit, name, grade, phone, username in rows
    ]


def get_visit(db: Session, visit_id: int) -> DailyVisit:
    visit = db.get(DailyVisit, visit_id)
    if not visit:
        raise NotFoundError(f"Visit {visit_id} not found")
    return visit


def create_visit(
    db: Session,
    data: VisitCreate,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> DailyVisit:
    """
    Record a visit stamped with the current clinic-local time.

    Raises:
        ReferentialIntegrityError: Student (or creator) does not exist
    """
    visit = DailyVisit(
        student_id=data.student_id,
        diagnosis=data.diagnosis,
        treatment=data.treatment,
        parac_syrup=data.parac_syrup,
        parac_tab=data.parac_tab,
        hyoscine=data.hyoscine,
        referred=data.referred,
        referral_time=data.referral_time,
        occurred_at=clinic_now(),
        created_by_user_id=actor_user_id,
    )
    db.add(visit)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ReferentialIntegrityError(MISSING_REFERENCE)
    audit_service.log_event(
        db, AuditAction.CREATE_VISIT, TABLE, record_id=visit.id, actor_user_id=actor_user_id, request=request
    )
    db.commit()
    return visit


def mark_notified(
    db: Session,
    visit_id: int,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> DailyVisit:
    """Flag the guardian WhatsApp message as sent and stamp the send time."""
    visit = get_visit(db, visit_id)
    visit.whatsapp_notified = True
    visit.whatsapp_sent_at = clinic_now()
    audit_service.log_event(
        db, AuditAction.WHATSAPP_NOTIFIED, TABLE, record_id=visit.id, actor_user_id=actor_user_id, request=request
    )
    db.commit()
    return visit


def delete_visit(
    db: Session,
    visit_id: int,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> None:
    visit = get_visit(db, visit_id)
    db.delete(visit)
    audit_service.log_event(
        db, AuditAction.DELETE_VISIT, TABLE, record_id=visit_id, actor_user_id=actor_user_id, request=request
    )
    db.commit()
