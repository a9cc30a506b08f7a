from datetime import date, datetime

from sqlalchemy import Date, DateTime, MetaData
from sqlalchemy.orm import DeclarativeBase

# Deterministic constraint names so column migrations can refer to them
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Timestamps are naive clinic-local values; SQLite has no timezone storage.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
    type_annotation_map = {
        datetime: DateTime(),
        date: Date(),
    }
