"""
Admin credentials: bcrypt password hashes and signed JWT access tokens.

Tokens carry the admin ID in ``sub`` and a fixed ``scope`` claim, so a token
minted for anything else with the same secret is not accepted here.
"""

import base64
import hashlib
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt

from app.config import settings

ADMIN_TOKEN_SCOPE = "comments:admin"

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


def _bcrypt_input(password: str) -> bytes:
    raw = password.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        # Fold long passphrases into a fixed-size digest so every byte counts
        raw = base64.b64encode(hashlib.sha256(raw).digest())
    return raw


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_bcrypt_input(password), bcrypt.gensalt(rounds=12)).decode("ascii")


def check_password(password: str, password_hash: str) -> bool:
    """False for a wrong password and for a stored value that is not a bcrypt hash."""
    try:
        return bcrypt.checkpw(_bcrypt_input(password), password_hash.encode("ascii"))
    except ValueError:
        return False


def issue_admin_token(admin_id: int, lifetime: timedelta | None = None) -> str:
    """
    Sign an access token for an admin.

    Args:
        admin_id: Admin the token authenticates
        lifetime: Validity period, ACCESS_TOKEN_EXPIRE_MINUTES when omitted
    """
    issued_at = datetime.now(UTC)
    if lifetime is None:
        lifetime = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    claims = {
        "sub": str(admin_id),
        "scope": ADMIN_TOKEN_SCOPE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def read_admin_token(token: str) -> int | None:
    """
    Admin ID from a valid token.

    Returns None for anything that does not verify: bad signature, expired,
    missing claims, wrong scope or a non-numeric subject.
    """
    try:
        claims = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.InvalidTokenError:
        return None

    if claims.get("scope") != ADMIN_TOKEN_SCOPE:
        return None
    try:
        return int(claims["sub"])
    except (TypeError, ValueError):
        return None
