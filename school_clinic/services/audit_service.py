"""Audit trail service.

Every successful mutation appends exactly one row through log_event, inside
the caller's transaction. log_event only flushes; the caller commits the
mutation and its audit row together, so a rolled-back mutation never leaves
an orphaned entry.

Security guidelines:
- NEVER put student names, diagnoses or passwords in the audit trail
- Record ids and table names only
- IP: Trust X-Forwarded-For only behind a configured proxy
"""

from fastapi import Request
from sqlalchemy.orm import Session

from school_clinic.core.config import settings
from school_clinic.db.enums import AuditAction
from school_clinic.db.models import AuditLog, User


def get_client_ip(request: Request | None) -> str | None:
    """
    Extract client IP from request.

    Only trusts X-Forwarded-For when TRUST_PROXY_HEADERS=True (behind reverse proxy).
    Otherwise uses request.client.host.
    """
    if not request:
        return None

    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            # X-Forwarded-For: client, proxy1, proxy2 - take first
            return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return None


def log_event(
    db: Session,
    action: AuditAction,
    table_name: str,
    record_id: int | None = None,
    actor_user_id: int | None = None,
    request: Request | None = None,
) -> AuditLog:
    """
    Append an audit entry to the current transaction.

    Args:
        db: Database session (not committed here)
        action: Action tag for the (entity, operation) pair
        table_name: Affected table, or "All" for whole-database operations
        record_id: Affected row id (None for bulk and whole-database operations)
        actor_user_id: Acting user (None when the login username is unknown)
        request: FastAPI request for source address extraction

    Raises:
        SQLAlchemyError: If the row cannot be written; the caller's
            transaction must then be rolled back
    """
    entry = AuditLog(
        user_id=actor_user_id,
        action_type=action.value,
        table_name=table_name,
        record_id=record_id,
        ip_address=get_client_ip(request),
    )
    db.add(entry)
    db.flush()
    return entry


def list_audit_logs(db: Session, limit: int | None = None) -> list[dict]:
    """
    Most recent audit entries, newest first.

    Entries whose actor is NULL (failed logins with an unknown username)
    are included with username None.
    """
    limit = limit or settings.AUDIT_LIST_LIMIT
    rows = (
        db.query(AuditLog, User.username)
        .outerjoin(User, AuditLog.user_id == User.id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "id": entry.id,
            "user_id": entry.user_id,
            "username": username,
            "action_type": entry.action_type,
            "table_name": entry.table_name,
            "record_id": entry.record_id,
            "created_at": entry.created_at,
            "ip_address": entry.ip_address,
        }
        for entry, username in rows
    ]
