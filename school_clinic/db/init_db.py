"""Database bootstrap: tables, column migrations and seed rows.

Safe to run unconditionally at every process start.
"""

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from school_clinic.core.config import settings
from school_clinic.core.migrations import apply_column_migrations
from school_clinic.core.security import hash_password
from school_clinic.db.base import Base
from school_clinic.db.enums import Role
from school_clinic.db.models import SETTINGS_ROW_ID, ClinicSettings, User

logger = logging.getLogger(__name__)


def seed_default_admin(db: Session) -> bool:
    """Create the bootstrap administrator if that username does not exist."""
    existing = db.query(User).filter(User.username == settings.DEFAULT_ADMIN_USERNAME).first()
    if existing:
        return False
    db.add(
        User(
            username=settings.DEFAULT_ADMIN_USERNAME,
            password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
            role=Role.ADMIN.value,
        )
    )
    return True


def seed_settings_row(db: Session) -> bool:
    """Create the singleton settings row if it is missing."""
    if db.get(ClinicSettings, SETTINGS_ROW_ID):
        return False
    db.add(ClinicSettings(id=SETTINGS_ROW_ID, school_name="", supervisor_name=""))
    return True


def init_db(engine: Engine) -> None:
    """
    Bootstrap the store.

    1. Create missing tables
    2. Add missing columns to existing tables
    3. Seed the default administrator and the settings row
    """
    Base.metadata.create_all(bind=engine)

    applied = apply_column_migrations(engine)
    if applied:
        logger.info("Schema upgraded: %s", ", ".join(applied))

    with Session(bind=engine) as db:
        created_admin = seed_default_admin(db)
        created_settings = seed_settings_row(db)
        db.commit()

    if created_admin:
        logger.info("Seeded default administrator '%s'", settings.DEFAULT_ADMIN_USERNAME)
    if created_settings:
        logger.info("Seeded settings row")
