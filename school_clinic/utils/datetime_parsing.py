"""Clinic-local clock and date-range helpers."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from school_clinic.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"


def _resolve_timezone(tz_name: str | None) -> ZoneInfo:
    name = tz_name or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        logger.warning("Unknown timezone '%s', defaulting to %s", name, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def clinic_now() -> datetime:
    """
    Current wall-clock time in the clinic timezone.

    Stored timestamps are naive clinic-local values so that SQL date()
    comparisons line up with the clinic's calendar day.
    """
    return datetime.now(_resolve_timezone(settings.CLINIC_TIMEZONE)).replace(tzinfo=None)


def clinic_today() -> date:
    """Current calendar day in the clinic timezone."""
    return clinic_now().date()


def day_bounds(start: date | None, end: date | None) -> tuple[datetime | None, datetime | None]:
    """
    Convert an inclusive calendar-day range to [start, end) datetimes.

    Either side may be open (None).
    """
    lower = datetime.combine(start, time.min) if start else None
    upper = datetime.combine(end + timedelta(days=1), time.min) if end else None
    return lower, upper
