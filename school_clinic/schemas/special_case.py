"""Pydantic schemas for special-case follow-ups."""

from datetime import date

from pydantic import BaseModel, Field

from school_clinic.schemas.common import Flag, OptionalText, RequestModel, RequiredText


class SpecialCaseCreate(RequestModel):
    """Request to record a follow-up. follow_up_date defaults to today."""
    student_id: int = Field(..., gt=0)
    follow_up_date: date | None = None
    follow_up_type: RequiredText  # periodic / emergency / annual
    symptoms: RequiredText
    services: RequiredText
    recommendations: OptionalText = None
    referred: Flag = False


class SpecialCaseRead(BaseModel):
    id: int
    student_id: int
    follow_up_date: date
    follow_up_type: str | None
    symptoms: str | None
    services: str | None
    recommendations: str | None
    referred: bool
    created_by_user_id: int | None
    whatsapp_notified: bool

    student_name: str
    grade: str
    phone: str | None
    chronic_condition: str | None
    created_by: str | None = None
