"""Rate limiting configuration for the clinic API."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from school_clinic.core.config import settings

# Single process deployment: in-memory storage is sufficient
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)


def auth_rate_limit() -> str:
    """Limit string for the login endpoint."""
    return f"{settings.RATE_LIMIT_AUTH}/minute"
