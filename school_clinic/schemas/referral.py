"""Pydantic schemas for external referrals."""

from datetime import datetime

from pydantic import BaseModel, Field

from school_clinic.schemas.common import OptionalText, RequestModel, RequiredText


class ReferralCreate(RequestModel):
    student_id: int = Field(..., gt=0)
    reason: RequiredText
    destination: RequiredText
    age: OptionalText = None
    gender: OptionalText = None
    history: OptionalText = None
    referral_time: OptionalText = None


class ReferralRead(BaseModel):
    id: int
    student_id: int
    reason: str | None
    destination: str | None
    age: str | None
    gender: str | None
    history: str | None
    referral_time: str | None
    occurred_at: datetime
    created_by_user_id: int | None
    whatsapp_notified: bool

    student_name: str
    grade: str
    phone: str | None
    created_by: str | None = None
