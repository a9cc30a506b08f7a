"""Auth router - login and current identity."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from school_clinic.core.deps import get_current_session, get_db
from school_clinic.core.rate_limit import auth_rate_limit, limiter
from school_clinic.schemas.auth import LoginRequest, LoginResponse, SessionUser, UserSession
from school_clinic.services import auth_service
from school_clinic.services.errors import AuthenticationError

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(auth_rate_limit)
def login(
    request: Request,
    body: LoginRequest,
    db: Session = Depends(get_db),
):
    """
    Exchange username/password for a session token.

    Credential failures share one generic 401 message; locked and inactive
    accounts get a specific 403.
    """
    try:
        return auth_service.login(db, body.username, body.password, request=request)
    except AuthenticationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/me", response_model=SessionUser)
def me(session: UserSession = Depends(get_current_session)):
    return SessionUser(id=session.user_id, username=session.username, role=session.role)
