"""Tests for admin password hashing and access tokens."""

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from app.config import settings
from app.core.security import (
    ADMIN_TOKEN_SCOPE,
    check_password,
    hash_password,
    issue_admin_token,
    read_admin_token,
)


@pytest.mark.unit
class TestPasswords:
    def test_round_trip(self):
        password_hash = hash_password("correct horse")

        assert password_hash.startswith("$2b$")
        assert check_password("correct horse", password_hash)
        assert not check_password("wrong horse", password_hash)

    def test_long_passwords_differ_past_72_bytes(self):
        base = "x" * 80
        password_hash = hash_password(base + "a")

        assert check_password(base + "a", password_hash)
        assert not check_password(base + "b", password_hash)

    def test_garbage_hash(self):
        assert check_password("anything", "not-a-bcrypt-hash") is False


@pytest.mark.unit
class TestAdminTokens:
    def test_round_trip(self):
        assert read_admin_token(issue_admin_token(7)) == 7

    def test_expired(self):
        assert read_admin_token(issue_admin_token(7, lifetime=timedelta(seconds=-5))) is None

    def test_signed_with_other_key(self):
        claims = jwt.decode(
            issue_admin_token(7), settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        forged = jwt.encode(claims, "some-other-secret", algorithm=settings.ALGORITHM)

        assert read_admin_token(forged) is None

    def test_wrong_scope(self):
        token = jwt.encode(
            {"sub": "7", "scope": "other", "exp": datetime.now(UTC) + timedelta(minutes=5)},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )

        assert read_admin_token(token) is None

    def test_non_numeric_subject(self):
        token = jwt.encode(
            {"sub": "abc", "scope": ADMIN_TOKEN_SCOPE, "exp": datetime.now(UTC) + timedelta(minutes=5)},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )

        assert read_admin_token(token) is None
