"""Tests for the administration CLI."""

import pytest
from click.testing import CliRunner
from sqlalchemy.orm import sessionmaker

from school_clinic import cli as cli_module
from school_clinic.core.security import verify_password
from school_clinic.db.models import AuditLog, User


@pytest.fixture
def runner(engine, monkeypatch) -> CliRunner:
    monkeypatch.setattr(cli_module, "SessionLocal", sessionmaker(bind=engine))
    monkeypatch.setattr(cli_module, "engine", engine)
    return CliRunner()


def test_init_db_is_repeatable(runner):
    first = runner.invoke(cli_module.cli, ["init-db"])
    second = runner.invoke(cli_module.cli, ["init-db"])

    assert first.exit_code == 0
    assert second.exit_code == 0
    assert "Database ready" in second.output


def test_create_user(runner, db):
    result = runner.invoke(
        cli_module.cli,
        ["create-user", "--username", "mona", "--password", "pw-123", "--role", "School Nurse"],
    )

    assert result.exit_code == 0, result.output
    user = db.query(User).filter(User.username == "mona").one()
    assert user.role == "School Nurse"
    audit = db.query(AuditLog).order_by(AuditLog.id.desc()).first()
    assert (audit.action_type, audit.user_id) == ("CREATE_USER", None)


def test_create_duplicate_user_fails(runner, nurse_user):
    result = runner.invoke(
        cli_module.cli, ["create-user", "--username", "nurse", "--password", "x"]
    )

    assert result.exit_code == 1
    assert "nurse" in result.output


def test_unlock_and_reset_password(runner, db, nurse_user):
    user_id = nurse_user.id
    nurse_user.failed_attempts = 9
    db.commit()

    unlock = runner.invoke(cli_module.cli, ["unlock-user", "--username", "nurse"])
    reset = runner.invoke(
        cli_module.cli, ["reset-password", "--username", "nurse", "--password", "changed"]
    )

    assert unlock.exit_code == 0
    assert reset.exit_code == 0
    db.expire_all()
    user = db.get(User, user_id)
    assert user.failed_attempts == 0
    assert verify_password("changed", user.password_hash)


def test_unknown_username(runner):
    result = runner.invoke(cli_module.cli, ["unlock-user", "--username", "ghost"])

    assert result.exit_code == 1
    assert "not found" in result.output
