"""Special cases router - chronic-case follow-ups."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from school_clinic.core.deps import get_current_session, get_db, require_roles
from school_clinic.db.enums import ROLES_CLINICAL
from school_clinic.schemas.auth import UserSession
from school_clinic.schemas.common import CreatedResponse, SuccessResponse
from school_clinic.schemas.special_case import SpecialCaseCreate, SpecialCaseRead
from school_clinic.services import special_case_service
from school_clinic.services.errors import NotFoundError, ReferentialIntegrityError

router = APIRouter(prefix="/special-cases", tags=["Special Cases"])


@router.get("", response_model=list[SpecialCaseRead])
def list_special_cases(
    student_name: str | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return special_case_service.list_special_cases(
        db, student_name=student_name, start_date=start_date, end_date=end_date
    )


@router.post("", response_model=CreatedResponse)
def create_special_case(
    request: Request,
    data: SpecialCaseCreate,
    session: UserSession = Depends(require_roles(ROLES_CLINICAL)),
    db: Session = Depends(get_db),
):
    try:
        follow_up = special_case_service.create_special_case(
            db, data, actor_user_id=session.user_id, request=request
        )
    except ReferentialIntegrityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return CreatedResponse(id=follow_up.id)


@router.put("/{follow_up_id}/whatsapp", response_model=SuccessResponse)
def mark_notified(
    follow_up_id: int,
    request: Request,
    session: UserSession = Depends(require_roles(ROLES_CLINICAL)),
    db: Session = Depends(get_db),
):
    try:
        special_case_service.mark_notified(
            db, follow_up_id, actor_user_id=session.user_id, request=request
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Follow-up not found")
    return SuccessResponse()


@router.delete("/{follow_up_id}", response_model=SuccessResponse)
def delete_special_case(
    follow_up_id: int,
    request: Request,
    session: UserSession = Depends(require_roles(ROLES_CLINICAL)),
    db: Session = Depends(get_db),
):
    try:
        special_case_service.delete_special_case(
            db, follow_up_id, actor_user_id=session.user_id, request=request
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Follow-up not found")
    return SuccessResponse()
