"""External referrals."""

from datetime import date

from fastapi import Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from school_clinic.db.enums import AuditAction
from school_clinic.db.models import Referral, Student, User
from school_clinic.schemas.referral import ReferralCreate, ReferralRead
from school_clinic.services import audit_service
from school_clinic.services.errors import NotFoundError, ReferentialIntegrityError
from school_clinic.services.record_query import (
    MISSING_REFERENCE,
    apply_datetime_range,
    apply_student_name_filter,
    column_values,
)
from school_clinic.utils.datetime_parsing import clinic_now

TABLE = Referral.__tablename__


def list_referrals(
    db: Session,
    student_name: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[ReferralRead]:
    query = (
        db.query(Referral, Student.name, Student.grade, Student.phone, User.username)
        .join(Referral.student)
        .outerjoin(Referral.created_by)
    )
    query = apply_student_name_filter(query, student_name)
    query = apply_datetime_range(query, Referral.occurred_at, start_date, end_date)
    rows = query.order_by(Referral.occurred_at.desc(), Referral.id.desc()).all()
    return [
        ReferralRead(
            **column_values(referral),
            student_name=name,
            grade=grade,
            phone=phone,
            created_by=username,
        )
        for referral, name, grade, phone, username in rows
    ]


def get_referral(db: Session, referral_id: int) -> Referral:
    referral = db.get(Referral, referral_id)
    if not referral:
        raise NotFoundError(f"Referral {referral_id} not found")
    return referral


def create_referral(
    db: Session,
    data: ReferralCreate,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> Referral:
    referral = Referral(
        student_id=data.student_id,
        reason=data.reason,
        destination=data.destination,
        age=data.age,
        gender=data.gender,
        history=data.history,
        referral_time=data.referral_time,
        occurred_at=clinic_now(),
        created_by_user_id=actor_user_id,
    )
    db.add(referral)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ReferentialIntegrityError(MISSING_REFERENCE)
    audit_service.log_event(
        db, AuditAction.CREATE_REFERRAL, TABLE, record_id=referral.id, actor_user_id=actor_user_id, request=request
    )
    db.commit()
    return referral


def mark_notified(
    db: Session,
    referral_id: int,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> Referral:
    referral = get_referral(db, referral_id)
    referral.whatsapp_notified = True
    audit_service.log_event(
        db, AuditAction.WHATSAPP_NOTIFIED, TABLE, record_id=referral.id, actor_user_id=actor_user_id, request=request
    )
    db.commit()
    return referral


def delete_referral(
    db: Session,
    referral_id: int,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> None:
    referral = get_referral(db, referral_id)
    db.delete(referral)
    audit_service.log_event(
        db, AuditAction.DELETE_REFERRAL, TABLE, record_id=referral_id, actor_user_id=actor_user_id, request=request
    )
    db.commit()
