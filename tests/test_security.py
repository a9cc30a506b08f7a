"""Tests for password hashing and session tokens."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from school_clinic.core.config import settings
from school_clinic.core.security import (
    create_session_token,
    decode_session_token,
    hash_password,
    verify_password,
)


def test_hash_and_verify():
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert hashed.startswith("$2")
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_rejects_empty_and_malformed():
    assert not verify_password("", hash_password("x"))
    assert not verify_password("x", "")
    assert not verify_password("x", "not-a-bcrypt-hash")


def test_token_carries_identity_and_eight_hour_window():
    token = create_session_token(7, "nurse", "School Nurse")
    payload = decode_session_token(token)
    assert payload["sub"] == "7"
    assert payload["username"] == "nurse"
    assert payload["role"] == "School Nurse"
    assert payload["exp"] - payload["iat"] == settings.JWT_EXPIRES_HOURS * 3600


def test_expired_token_rejected():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "1", "username": "a", "role": "Admin", "iat": now - timedelta(hours=9), "exp": now - timedelta(hours=1)},
        settings.JWT_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_session_token(token)


def test_previous_secret_accepted_during_rotation(monkeypatch):
    old_token = create_session_token(1, "admin", "Admin")
    monkeypatch.setattr(settings, "JWT_SECRET_PREVIOUS", settings.JWT_SECRET)
    monkeypatch.setattr(settings, "JWT_SECRET", "rotated-secret")

    assert decode_session_token(old_token)["sub"] == "1"


def test_foreign_secret_rejected():
    token = jwt.encode({"sub": "1", "username": "a", "role": "Admin"}, "other", algorithm="HS256")
    with pytest.raises(jwt.InvalidTokenError):
        decode_session_token(token)
