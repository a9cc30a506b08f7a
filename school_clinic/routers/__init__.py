"""API routers."""

from school_clinic.routers.audit import router as audit_router
from school_clinic.routers.auth import router as auth_router
from school_clinic.routers.clinic_appointments import router as clinic_appointments_router
from school_clinic.routers.dashboard import router as dashboard_router
from school_clinic.routers.referrals import router as referrals_router
from school_clinic.routers.settings import router as settings_router
from school_clinic.routers.special_cases import router as special_cases_router
from school_clinic.routers.students import router as students_router
from school_clinic.routers.users import router as users_router
from school_clinic.routers.visits import router as visits_router

__all__ = [
    "audit_router",
    "auth_router",
    "clinic_appointments_router",
    "dashboard_router",
    "referrals_router",
    "settings_router",
    "special_cases_router",
    "students_router",
    "users_router",
    "visits_router",
]
