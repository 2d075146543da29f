"""Tests for admin authentication helpers."""

from datetime import timedelta

import pytest
from fastapi import HTTPException

from news_admin.auth import (
    AdminSession,
    authenticate_user,
    create_access_token,
    decode_access_token,
    get_password_hash,
    login,
)
from news_admin.config import Settings
from news_admin.utils import utcnow


@pytest.fixture
def settings():
    return Settings(
        admin_username="admin",
        admin_password="plain",
        admin_password_hash=None,
        jwt_secret_key="test-secret",
        log_file="",
        log_error_file="",
    )


def test_plain_password(settings):
    assert authenticate_user("admin", "plain", settings) is True
    assert authenticate_user("admin", "wrong", settings) is False
    assert authenticate_user("root", "plain", settings) is False


def test_hash_wins_over_plain_password(settings):
    hashed = settings.model_copy(update={"admin_password_hash": get_password_hash("hashed-secret")})
    assert authenticate_user("admin", "hashed-secret", hashed) is True
    assert authenticate_user("admin", "plain", hashed) is False


def test_login_issues_decodable_token(settings):
    result = login("admin", "plain", settings)
    assert result.success is True

    session = decode_access_token(result.access_token, settings)
    assert session.username == "admin"
    assert session.is_authenticated is True


def test_failed_login(settings):
    result = login("admin", "nope", settings)
    assert result.success is False
    assert result.access_token is None


def test_expired_token_rejected(settings):
    token = create_access_token({"sub": "admin"}, expires_delta=timedelta(minutes=-5), settings=settings)
    with pytest.raises(HTTPException) as exc_info:
        decode_access_token(token, settings)
    assert exc_info.value.status_code == 401


def test_token_signed_with_other_secret_rejected(settings):
    token = create_access_token({"sub": "admin"}, settings=settings)
    other = settings.model_copy(update={"jwt_secret_key": "other"})
    with pytest.raises(HTTPException):
        decode_access_token(token, other)


def test_session_expiry():
    assert AdminSession(username="a").is_authenticated is True
    past = AdminSession(username="a", expires_at=utcnow() - timedelta(seconds=1))
    assert past.is_authenticated is False
