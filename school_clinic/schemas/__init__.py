"""Pydantic schemas for API request/response models."""

from school_clinic.schemas.auth import LoginRequest, LoginResponse, SessionUser, TokenPayload, UserSession
from school_clinic.schemas.common import CreatedResponse, SuccessResponse
from school_clinic.schemas.student import (
    RosterImportResult,
    RosterRow,
    StudentCreate,
    StudentRead,
    StudentUpdate,
)
from school_clinic.schemas.visit import VisitCreate, VisitRead
from school_clinic.schemas.special_case import SpecialCaseCreate, SpecialCaseRead
from school_clinic.schemas.referral import ReferralCreate, ReferralRead
from school_clinic.schemas.clinic_appointment import ClinicAppointmentCreate, ClinicAppointmentRead
from school_clinic.schemas.user import PasswordReset, UserCreate, UserRead, UserUpdate
from school_clinic.schemas.settings import SettingsRead, SettingsUpdate
from school_clinic.schemas.backup import Snapshot
from school_clinic.schemas.audit import AuditLogRead
from school_clinic.schemas.dashboard import DashboardResponse, WeeklyStat

__all__ = [
    # Auth
    "LoginRequest",
    "LoginResponse",
    "SessionUser",
    "TokenPayload",
    "UserSession",
    # Common
    "CreatedResponse",
    "SuccessResponse",
    # Students
    "StudentCreate",
    "StudentUpdate",
    "StudentRead",
    "RosterRow",
    "RosterImportResult",
    # Clinical records
    "VisitCreate",
    "VisitRead",
    "SpecialCaseCreate",
    "SpecialCaseRead",
    "ReferralCreate",
    "ReferralRead",
    "ClinicAppointmentCreate",
    "ClinicAppointmentRead",
    # Users
    "UserCreate",
    "UserUpdate",
    "UserRead",
    "PasswordReset",
    # Settings
    "SettingsRead",
    "SettingsUpdate",
    "Snapshot",
    # Reporting
    "AuditLogRead",
    "DashboardResponse",
    "WeeklyStat",
]
