"""Tests for store bootstrap and additive column migrations."""

import pytest
from sqlalchemy import inspect, text

from school_clinic.core.config import settings
from school_clinic.core.migrations import (
    COLUMN_MIGRATIONS,
    ColumnMigration,
    MigrationError,
    apply_column_migrations,
    pending_migrations,
)
from school_clinic.core.security import verify_password
from school_clinic.db.init_db import init_db
from school_clinic.db.models import ClinicSettings, User
from school_clinic.db.session import create_db_engine


def test_init_db_is_idempotent(engine, db):
    init_db(engine)
    init_db(engine)

    admins = db.query(User).filter(User.username == settings.DEFAULT_ADMIN_USERNAME).all()
    assert len(admins) == 1
    assert admins[0].role == "Admin"
    assert verify_password(settings.DEFAULT_ADMIN_PASSWORD, admins[0].password_hash)

    rows = db.query(ClinicSettings).all()
    assert len(rows) == 1
    assert rows[0].id == 1
    assert rows[0].school_name == ""
    assert rows[0].supervisor_name == ""


def test_init_db_creates_all_tables(engine):
    tables = set(inspect(engine).get_table_names())
    assert {
        "users",
        "students",
        "daily_visits",
        "special_follow_ups",
        "referrals",
        "clinic_appointments",
        "audit_logs",
        "settings",
    } <= tables


def test_foreign_keys_are_enforced(engine):
    with engine.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_legacy_tables_gain_missing_columns(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'legacy.db'}")
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE referrals ("
            "id INTEGER PRIMARY KEY AUTOINCREMENT, student_id INTEGER NOT NULL, "
            "reason TEXT, destination TEXT, occurred_at DATETIME NOT NULL, "
            "created_by_user_id INTEGER, whatsapp_notified BOOLEAN NOT NULL DEFAULT 0)"
        ))
        conn.execute(text(
            "CREATE TABLE settings (id INTEGER PRIMARY KEY, school_name TEXT, "
            "supervisor_name TEXT, logo_path TEXT)"
        ))

    assert len(pending_migrations(engine)) == len(COLUMN_MIGRATIONS)

    init_db(engine)

    referral_columns = {c["name"] for c in inspect(engine).get_columns("referrals")}
    assert {"age", "gender", "history", "referral_time"} <= referral_columns
    settings_columns = {c["name"] for c in inspect(engine).get_columns("settings")}
    assert "daily_closing_time" in settings_columns
    assert pending_migrations(engine) == []

    # Second start applies nothing
    assert apply_column_migrations(engine) == []
    engine.dispose()


def test_migration_failure_names_the_column(engine):
    broken = (ColumnMigration("no_such_table", "extra", COLUMN_MIGRATIONS[0].type_),)
    with pytest.raises(MigrationError, match="no_such_table.extra"):
        apply_column_migrations(engine, broken)
