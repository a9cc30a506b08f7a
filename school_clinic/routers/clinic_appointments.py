"""Clinic appointments router - specialist-clinic bookings.

Open to every resolved identity, unlike the other clinical records.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from school_clinic.core.deps import get_current_session, get_db
from school_clinic.schemas.auth import UserSession
from school_clinic.schemas.clinic_appointment import ClinicAppointmentCreate, ClinicAppointmentRead
from school_clinic.schemas.common import CreatedResponse, SuccessResponse
from school_clinic.services import clinic_appointment_service
from school_clinic.services.errors import NotFoundError, ReferentialIntegrityError

router = APIRouter(prefix="/clinic-appointments", tags=["Clinic Appointments"])


@router.get("", response_model=list[ClinicAppointmentRead])
def list_appointments(
    student_name: str | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return clinic_appointment_service.list_appointments(
        db, student_name=student_name, start_date=start_date, end_date=end_date
    )


@router.post("", response_model=CreatedResponse)
def create_appointment(
    request: Request,
    data: ClinicAppointmentCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        appointment = clinic_appointment_service.create_appointment(
            db, data, actor_user_id=session.user_id, request=request
        )
    except ReferentialIntegrityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return CreatedResponse(id=appointment.id)


@router.put("/{appointment_id}/whatsapp", response_model=SuccessResponse)
def mark_notified(
    appointment_id: int,
    request: Request,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        clinic_appointment_service.mark_notified(
            db, appointment_id, actor_user_id=session.user_id, request=request
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Clinic appointment not found")
    return SuccessResponse()


@router.delete("/{appointment_id}", response_model=SuccessResponse)
def delete_appointment(
    appointment_id: int,
    request: Request,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        clinic_appointment_service.delete_appointment(
            db, appointment_id, actor_user_id=session.user_id, request=request
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Clinic appointment not found")
    return SuccessResponse()
