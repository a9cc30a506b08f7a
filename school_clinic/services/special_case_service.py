"""Special-case follow-ups for students with chronic conditions."""

from datetime import date

from fastapi import Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from school_clinic.db.enums import AuditAction
from school_clinic.db.models import SpecialFollowUp, Student, User
from school_clinic.schemas.special_case import SpecialCaseCreate, SpecialCaseRead
from school_clinic.services import audit_service
from school_clinic.services.errors import NotFoundError, ReferentialIntegrityError
from school_clinic.services.record_query import (
    MISSING_REFERENCE,
    apply_date_range,
    apply_student_name_filter,
    column_values,
)
from school_clinic.utils.datetime_parsing import clinic_today

TABLE = SpecialFollowUp.__tablename__


def list_special_cases(
    db: Session,
    student_name: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[SpecialCaseRead]:
    """Follow-ups by follow-up date, newest first, with the student's chronic condition."""
    query = (
        db.query(
            SpecialFollowUp,
            Student.name,
            Student.grade,
            Student.phone,
            Student.chronic_condition,
            User.username,
        )
        .join(SpecialFollowUp.student)
        .outerjoin(SpecialFollowUp.created_by)
    )
    query = apply_student_name_filter(query, student_name)
    query = apply_date_range(query, SpecialFollowUp.follow_up_date, start_date, end_date)
    rows = query.order_by(SpecialFollowUp.follow_up_date.desc(), SpecialFollowUp.id.desc()).all()
    return [
        SpecialCaseRead(
            **column_values(follow_up),
            student_name=name,
            grade=grade,
            phone=phone,
            chronic_condition=chronic_condition,
            created_by=username,
        )
        for follow_up, name, grade, phone, chronic_condition, username in rows
    ]


def get_special_case(db: Session, follow_up_id: int) -> SpecialFollowUp:
    follow_up = db.get(SpecialFollowUp, follow_up_id)
    if not follow_up:
        raise NotFoundError(f"Follow-up {follow_up_id} not found")
    return follow_up


def create_special_case(
    db: Session,
    data: SpecialCaseCreate,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> SpecialFollowUp:
    follow_up = SpecialFollowUp(
        student_id=data.student_id,
        follow_up_date=data.follow_up_date or clinic_today(),
        follow_up_type=data.follow_up_type,
        symptoms=data.symptoms,
        services=data.services,
        recommendations=data.recommendations,
        referred=data.referred,
        created_by_user_id=actor_user_id,
    )
    db.add(follow_up)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ReferentialIntegrityError(MISSING_REFERENCE)
    audit_service.log_event(
        db,
        AuditAction.CREATE_SPECIAL_CASE,
        TABLE,
        record_id=follow_up.id,
        actor_user_id=actor_user_id,
        request=request,
    )
    db.commit()
    return follow_up


def mark_notified(
    db: Session,
    follow_up_id: int,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> SpecialFollowUp:
    follow_up = get_special_case(db, follow_up_id)
    follow_up.whatsapp_notified = True
    audit_service.log_event(
        db,
        AuditAction.WHATSAPP_NOTIFIED,
        TABLE,
        record_id=follow_up.id,
        actor_user_id=actor_user_id,
        request=request,
    )
    db.commit()
    return follow_up


def delete_special_case(
    db: Session,
    follow_up_id: int,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> None:
    follow_up = get_special_case(db, follow_up_id)
    db.delete(follow_up)
    audit_service.log_event(
        db,
        AuditAction.DELETE_SPECIAL_CASE,
        TABLE,
        record_id=follow_up_id,
        actor_user_id=actor_user_id,
        request=request,
    )
    db.commit()
