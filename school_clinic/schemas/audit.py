"""Pydantic schemas for the audit trail."""

from datetime import datetime

from pydantic import BaseModel


class AuditLogRead(BaseModel):
    """Audit entry enriched with the acting user's name (None for unknown actors)."""
    id: int
    user_id: int | None
    username: str | None
    action_type: str
    table_name: str
    record_id: int | None
    created_at: datetime
    ip_address: str | None
