"""Audit router - API endpoint for viewing the audit trail."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from school_clinic.core.deps import get_db, require_roles
from school_clinic.db.enums import ROLES_ADMIN_ONLY
from school_clinic.schemas.audit import AuditLogRead
from school_clinic.schemas.auth import UserSession
from school_clinic.services import audit_service

router = APIRouter(prefix="/audit", tags=["Audit"])


@router.get("", response_model=list[AuditLogRead])
def list_audit_logs(
    session: UserSession = Depends(require_roles(ROLES_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    """Most recent entries first, bounded by AUDIT_LIST_LIMIT."""
    return audit_service.list_audit_logs(db)
