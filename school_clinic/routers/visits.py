"""Visits router - daily clinic encounters."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from school_clinic.core.deps import get_current_session, get_db, require_roles
from school_clinic.db.enums import ROLES_CLINICAL
from school_clinic.schemas.auth import UserSession
from school_clinic.schemas.common import CreatedResponse, SuccessResponse
from school_clinic.schemas.visit import VisitCreate, VisitRead
from school_clinic.services import visit_service
from school_clinic.services.errors import NotFoundError, ReferentialIntegrityError

router = APIRouter(prefix="/visits", tags=["Visits"])


@router.get("", response_model=list[VisitRead])
def list_visits(
    student_name: str | None = Query(None, description="Substring of the student name"),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Visits newest first. Date filters are inclusive calendar days."""
    return visit_service.list_visits(
        db, student_name=student_name, start_date=start_date, end_date=end_date
    )


@router.post("", response_model=CreatedResponse)
def create_visit(
    request: Request,
    data: VisitCreate,
    session: UserSession = Depends(require_roles(ROLES_CLINICAL)),
    db: Session = Depends(get_db),
):
    try:
        visit = visit_service.create_visit(
            db, data, actor_user_id=session.user_id, request=request
        )
    except ReferentialIntegrityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return CreatedResponse(id=visit.id)


@router.put("/{visit_id}/whatsapp", response_model=SuccessResponse)
def mark_notified(
    visit_id: int,
    request: Request,
    session: UserSession = Depends(require_roles(ROLES_CLINICAL)),
    db: Session = Depends(get_db),
):
    try:
        visit_service.mark_notified(
            db, visit_id, actor_user_id=session.user_id, request=request
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Visit not found")
    return SuccessResponse()


@router.delete("/{visit_id}", response_model=SuccessResponse)
def delete_visit(
    visit_id: int,
    request: Request,
    session: UserSession = Depends(require_roles(ROLES_CLINICAL)),
    db: Session = Depends(get_db),
):
    try:
        visit_service.delete_visit(
            db, visit_id, actor_user_id=session.user_id, request=request
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Visit not found")
    return SuccessResponse()
