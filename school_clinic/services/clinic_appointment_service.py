"""Specialist-clinic appointments."""

from datetime import date

from fastapi import Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from school_clinic.db.enums import AuditAction
from school_clinic.db.models import ClinicAppointment, Student, User
from school_clinic.schemas.clinic_appointment import ClinicAppointmentCreate, ClinicAppointmentRead
from school_clinic.services import audit_service
from school_clinic.services.errors import NotFoundError, ReferentialIntegrityError
from school_clinic.services.record_query import (
    MISSING_REFERENCE,
    apply_date_range,
    apply_student_name_filter,
    column_values,
)

TABLE = ClinicAppointment.__tablename__


def list_appointments(
    db: Session,
    student_name: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[ClinicAppointmentRead]:
    query = (
        db.query(ClinicAppointment, Student.name, Student.grade, Student.phone, User.username)
        .join(ClinicAppointment.student)
        .outerjoin(ClinicAppointment.created_by)
    )
    query = apply_student_name_filter(query, student_name)
    query = apply_date_range(query, ClinicAppointment.appointment_date, start_date, end_date)
    rows = query.order_by(
        ClinicAppointment.appointment_date.desc(), ClinicAppointment.id.desc()
    ).all()
    return [
        ClinicAppointmentRead(
            **column_values(appointment),
            student_name=name,
            grade=grade,
            phone=phone,
            created_by=username,
        )
        for appointment, name, grade, phone, username in rows
    ]


def get_appointment(db: Session, appointment_id: int) -> ClinicAppointment:
    appointment = db.get(ClinicAppointment, appointment_id)
    if not appointment:
        raise NotFoundError(f"Clinic appointment {appointment_id} not found")
    return appointment


def create_appointment(
    db: Session,
    data: ClinicAppointmentCreate,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> ClinicAppointment:
    appointment = ClinicAppointment(
        student_id=data.student_id,
        appointment_date=data.appointment_date,
        health_problem=data.health_problem,
        clinic_name=data.clinic_name,
        created_by_user_id=actor_user_id,
    )
    db.add(appointment)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ReferentialIntegrityError(MISSING_REFERENCE)
    audit_service.log_event(
        db,
        AuditAction.CREATE_CLINIC_APPOINTMENT,
        TABLE,
        record_id=appointment.id,
        actor_user_id=actor_user_id,
        request=request,
    )
    db.commit()
    return appointment


def mark_notified(
    db: Session,
    appointment_id: int,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> ClinicAppointment:
    appointment = get_appointment(db, appointment_id)
    appointment.whatsapp_notified = True
    audit_service.log_event(
        db,
        AuditAction.WHATSAPP_CLINIC_APPOINTMENT,
        TABLE,
        record_id=appointment.id,
        actor_user_id=actor_user_id,
        request=request,
    )
    db.commit()
    return appointment


def delete_appointment(
    db: Session,
    appointment_id: int,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> None:
    appointment = get_appointment(db, appointment_id)
    db.delete(appointment)
    audit_service.log_event(
        db,
        AuditAction.DELETE_CLINIC_APPOINTMENT,
        TABLE,
        record_id=appointment_id,
        actor_user_id=actor_user_id,
        request=request,
    )
    db.commit()
