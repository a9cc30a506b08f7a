"""Shared helpers for the clinical record listings (joins and archive filters)."""

from datetime import date
from typing import Any

from sqlalchemy.orm import InstrumentedAttribute, Query

from school_clinic.db.base import Base
from school_clinic.db.models import Student
from school_clinic.utils.datetime_parsing import day_bounds

MISSING_REFERENCE = "Referenced student or user does not exist"


def column_values(instance: Base) -> dict[str, Any]:
    """Mapped column values of an ORM instance keyed by attribute name."""
    return {column.key: getattr(instance, column.key) for column in instance.__table__.columns}


def apply_student_name_filter(query: Query, student_name: str | None) -> Query:
    """Substring match on the joined student's name."""
    if student_name and student_name.strip():
        query = query.filter(Student.name.contains(student_name.strip()))
    return query


def apply_datetime_range(
    query: Query,
    column: InstrumentedAttribute,
    start_date: date | None,
    end_date: date | None,
) -> Query:
    """Restrict a timestamp column to whole calendar days [start_date, end_date]."""
    lower, upper = day_bounds(start_date, end_date)
    if lower is not None:
        query = query.filter(column >= lower)
    if upper is not None:
        query = query.filter(column < upper)
    return query


def apply_date_range(
    query: Query,
    column: InstrumentedAttribute,
    start_date: date | None,
    end_date: date | None,
) -> Query:
    """Restrict a date column to [start_date, end_date]."""
    if start_date is not None:
        query = query.filter(column >= start_date)
    if end_date is not None:
        query = query.filter(column <= end_date)
    return query
