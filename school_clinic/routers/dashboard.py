"""Dashboard router."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from school_clinic.core.deps import get_current_session, get_db
from school_clinic.schemas.auth import UserSession
from school_clinic.schemas.dashboard import DashboardResponse
from school_clinic.services import dashboard_service

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return dashboard_service.get_dashboard(db)
