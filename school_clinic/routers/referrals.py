"""Referrals router - hand-offs to external facilities."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from school_clinic.core.deps import get_current_session, get_db, require_roles
from school_clinic.db.enums import ROLES_CLINICAL
from school_clinic.schemas.auth import UserSession
from school_clinic.schemas.common import CreatedResponse, SuccessResponse
from school_clinic.schemas.referral import ReferralCreate, ReferralRead
from school_clinic.services import referral_service
from school_clinic.services.errors import NotFoundError, ReferentialIntegrityError

router = APIRouter(prefix="/referrals", tags=["Referrals"])


@router.get("", response_model=list[ReferralRead])
def list_referrals(
    student_name: str | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return referral_service.list_referrals(
        db, student_name=student_name, start_date=start_date, end_date=end_date
    )


@router.post("", response_model=CreatedResponse)
def create_referral(
    request: Request,
    data: ReferralCreate,
    session: UserSession = Depends(require_roles(ROLES_CLINICAL)),
    db: Session = Depends(get_db),
):
    try:
        referral = referral_service.create_referral(
            db, data, actor_user_id=session.user_id, request=request
        )
    except ReferentialIntegrityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return CreatedResponse(id=referral.id)


@router.put("/{referral_id}/whatsapp", response_model=SuccessResponse)
def mark_notified(
    referral_id: int,
    request: Request,
    session: UserSession = Depends(require_roles(ROLES_CLINICAL)),
    db: Session = Depends(get_db),
):
    try:
        referral_service.mark_notified(
            db, referral_id, actor_user_id=session.user_id, request=request
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Referral not found")
    return SuccessResponse()


@router.delete("/{referral_id}", response_model=SuccessResponse)
def delete_referral(
    referral_id: int,
    request: Request,
    session: UserSession = Depends(require_roles(ROLES_CLINICAL)),
    db: Session = Depends(get_db),
):
    try:
        referral_service.delete_referral(
            db, referral_id, actor_user_id=session.user_id, request=request
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Referral not found")
    return SuccessResponse()
