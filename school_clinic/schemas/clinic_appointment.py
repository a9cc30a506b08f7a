"""Pydantic schemas for specialist-clinic appointments."""

from datetime import date

from pydantic import AliasChoices, BaseModel, Field

from school_clinic.schemas.common import RequestModel, RequiredText


class ClinicAppointmentCreate(RequestModel):
    student_id: int = Field(..., gt=0)
    appointment_date: date = Field(
        ..., validation_alias=AliasChoices("appointment_date", "appointmentDate", "date")
    )
    health_problem: RequiredText
    clinic_name: RequiredText


class ClinicAppointmentRead(BaseModel):
    id: int
    student_id: int
    appointment_date: date
    health_problem: str | None
    clinic_name: str | None
    created_by_user_id: int | None
    whatsapp_notified: bool

    student_name: str
    grade: str
    phone: str | None
    created_by: str | None = None
