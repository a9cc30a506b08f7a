"""Pydantic schemas for daily clinic visits."""

from datetime import datetime

from pydantic import BaseModel, Field

from school_clinic.schemas.common import Flag, OptionalText, RequestModel, RequiredText


class VisitCreate(RequestModel):
    """Request to record a visit. occurred_at is set by the server."""
    student_id: int = Field(..., gt=0)
    diagnosis: RequiredText
    treatment: RequiredText
    parac_syrup: Flag = False
    parac_tab: Flag = False
    hyoscine: Flag = False
    referred: Flag = False
    referral_time: OptionalText = None


class VisitRead(BaseModel):
    """Visit joined with its student and creator."""
    id: int
    student_id: int
    diagnosis: str | None
    treatment: str | None
    parac_syrup: bool
    parac_tab: bool
    hyoscine: bool
    referred: bool
    referral_time: str | None
    occurred_at: datetime
    created_by_user_id: int | None
    whatsapp_notified: bool
    whatsapp_sent_at: datetime | None

    student_name: str
    grade: str
    phone: str | None
    created_by: str | None = None  # creator username
