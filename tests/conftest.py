"""
Test configuration and fixtures.

Provides:
- A fresh SQLite database file per test, bootstrapped with init_db
- Users for each role and session-token minting
- HTTPX AsyncClient with get_db overridden
"""
import os
import tempfile
from dataclasses import dataclass
from typing import AsyncGenerator, Generator

import pytest

# Settings are read at import time: point the app at a throwaway database
# and disable login throttling before anything imports school_clinic.
os.environ["DB_PATH"] = os.path.join(tempfile.mkdtemp(prefix="school-clinic-"), "app.db")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SINGLE_USER_MODE"] = "true"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ENV"] = "test"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from school_clinic.core.config import settings
from school_clinic.core.deps import get_db
from school_clinic.core.security import create_session_token, hash_password
from school_clinic.db.enums import Role
from school_clinic.db.init_db import init_db
from school_clinic.db.models import Student, User
from school_clinic.db.session import create_db_engine
from school_clinic.main import app

NURSE_PASSWORD = "nurse-pass"


# =============================================================================
# Database Fixtures (fresh file per test)
# =============================================================================

@pytest.fixture(scope="function")
def engine(tmp_path) -> Generator[Engine, None, None]:
    engine = create_db_engine(f"sqlite:///{tmp_path / 'clinic.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine: Engine) -> Generator[Session, None, None]:
    """Session configured like SessionLocal, bound to the per-test database."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture(scope="function")
def admin_user(db: Session) -> User:
    """The administrator seeded by init_db."""
    return db.query(User).filter(User.username == settings.DEFAULT_ADMIN_USERNAME).one()


@pytest.fixture(scope="function")
def nurse_user(db: Session) -> User:
    user = User(
        username="nurse",
        password_hash=hash_password(NURSE_PASSWORD),
        role=Role.SCHOOL_NURSE.value,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture(scope="function")
def student(db: Session) -> Student:
    student = Student(name="سارة أحمد", grade="الصف الثالث", phone="0501234567")
    db.add(student)
    db.commit()
    return student


@pytest.fixture(scope="function")
def token_mode(monkeypatch):
    """Resolve identity from Bearer tokens instead of the fixed administrator."""
    monkeypatch.setattr(settings, "SINGLE_USER_MODE", False)


def auth_header(user: User) -> dict[str, str]:
    token = create_session_token(user.id, user.username, user.role)
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient against the app. In the default single-user mode every
    request runs as the seeded administrator.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@dataclass
class RoleClients:
    """Token-authenticated clients for each role."""
    admin: AsyncClient
    nurse: AsyncClient
    anonymous: AsyncClient


@pytest.fixture(scope="function")
async def role_clients(
    db: Session,
    token_mode,
    admin_user: User,
    nurse_user: User,
) -> AsyncGenerator[RoleClients, None]:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_header(admin_user)
    ) as admin, AsyncClient(
        transport=transport, base_url="http://test", headers=auth_header(nurse_user)
    ) as nurse, AsyncClient(transport=transport, base_url="http://test") as anonymous:
        yield RoleClients(admin=admin, nurse=nurse, anonymous=anonymous)

    app.dependency_overrides.clear()


# =============================================================================
# Audit Helpers
# =============================================================================

@pytest.fixture(scope="function")
def audit_trail(db: Session):
    """Callable returning (action, table, record_id, user_id) tuples in insertion order."""
    from school_clinic.db.models import AuditLog

    def _entries() -> list[tuple]:
        db.expire_all()
        return [
            (entry.action_type, entry.table_name, entry.record_id, entry.user_id)
            for entry in db.query(AuditLog).order_by(AuditLog.id).all()
        ]

    return _entries
