from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import jwt

from app.core.config import get_settings

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash using the configured cost factor."""
    salt = bcrypt.gensalt(rounds=get_settings().BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash stored for this user
        return False


def create_access_token(
    claims: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Sign a JWT carrying the given claims.

    Tokens expire after JWT_EXPIRE_DAYS (7 days) unless expires_delta is given.
    """
    settings = get_settings()
    to_encode = claims.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.JWT_EXPIRE_DAYS)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_token(token: str) -> dict[str, Any]:
    """
    Verify signature and expiry, return the claims.

    Raises jose's ExpiredSignatureError / JWTError; callers map them to 401.
    """
    settings = get_settings()
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
