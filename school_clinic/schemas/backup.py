"""
Pydantic schemas for whole-database snapshots.

Row models carry every column including the primary key, so a snapshot
produced by backup can be restored with its ids intact. Unknown keys are
ignored and flags accept 0/1 as stored by older releases.

Row keys may be snake_case, camelCase (desktop client) or the PascalCase
column names written by earlier releases (StudentId, DateTime, ...).
"""

from datetime import date, datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_snake

from school_clinic.schemas.common import Flag, RequestModel

# Legacy column names that do not snake-case onto the current field name
LEGACY_COLUMN_NAMES = {
    "whats_app_notified": "whatsapp_notified",
    "whats_app_sent_date": "whatsapp_sent_at",
    "whatsapp_sent_date": "whatsapp_sent_at",
    "date_time": "occurred_at",
}


def _date_part(value: Any) -> Any:
    # DATETIME columns in older stores hold full timestamps for calendar dates
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    if isinstance(value, datetime):
        return value.date()
    return value


class SnapshotRow(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    # Per-row overrides applied after snake-casing (e.g. "date" on appointments)
    column_names: ClassVar[dict[str, str]] = {}

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        normalized = {}
        for key, value in data.items():
            name = to_snake(key) if isinstance(key, str) else key
            name = cls.column_names.get(name, LEGACY_COLUMN_NAMES.get(name, name))
            # An explicit current-name key wins over a legacy alias
            if name in normalized and key != name:
                continue
            normalized[name] = value
        return normalized


class SettingsSnapshot(SnapshotRow):
    school_name: str | None = ""
    supervisor_name: str | None = ""
    logo_path: str | None = None
    daily_closing_time: str | None = None


class StudentSnapshot(SnapshotRow):
    id: int
    name: str
    grade: str
    phone: str | None = None
    is_special_case: Flag = False
    chronic_condition: str | None = None


class VisitSnapshot(SnapshotRow):
    id: int
    student_id: int
    diagnosis: str | None = None
    treatment: str | None = None
    parac_syrup: Flag = False
    parac_tab: Flag = False
    hyoscine: Flag = False
    referred: Flag = False
    referral_time: str | None = None
    occurred_at: datetime
    created_by_user_id: int | None = None
    whatsapp_notified: Flag = False
    whatsapp_sent_at: datetime | None = None


class SpecialCaseSnapshot(SnapshotRow):
    id: int
    student_id: int
    follow_up_date: date
    follow_up_type: str | None = None
    symptoms: str | None = None
    services: str | None = None
    recommendations: str | None = None
    referred: Flag = False
    created_by_user_id: int | None = None
    whatsapp_notified: Flag = False

    @field_validator("follow_up_date", mode="before")
    @classmethod
    def calendar_day(cls, value: Any) -> Any:
        return _date_part(value)


class ReferralSnapshot(SnapshotRow):
    id: int
    student_id: int
    reason: str | None = None
    destination: str | None = None
    age: str | None = None
    gender: str | None = None
    history: str | None = None
    referral_time: str | None = None
    occurred_at: datetime
    created_by_user_id: int | None = None
    whatsapp_notified: Flag = False


class ClinicAppointmentSnapshot(SnapshotRow):
    column_names: ClassVar[dict[str, str]] = {"date": "appointment_date"}

    id: int
    student_id: int
    appointment_date: date
    health_problem: str | None = None
    clinic_name: str | None = None
    created_by_user_id: int | None = None
    whatsapp_notified: Flag = False

    @field_validator("appointment_date", mode="before")
    @classmethod
    def calendar_day(cls, value: Any) -> Any:
        return _date_part(value)


class Snapshot(RequestModel):
    """
    Full export of the operational tables.

    settings holds the singleton row as a one-element list (empty when the
    row is absent). Users and audit logs are never part of a snapshot. clinic_appointments
    is None for snapshots taken without it; restoring such a snapshot leaves
    no appointments behind.
    """
    settings: list[SettingsSnapshot] = []
    students: list[StudentSnapshot] = []
    visits: list[VisitSnapshot] = []
    special_cases: list[SpecialCaseSnapshot] = []
    referrals: list[ReferralSnapshot] = []
    clinic_appointments: list[ClinicAppointmentSnapshot] | None = None
