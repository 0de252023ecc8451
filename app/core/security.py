"""Password hashing, JWT access tokens and opaque refresh tokens."""

import secrets
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from app.core.clock import utc_now

if TYPE_CHECKING:
    from app.core.config import Settings

# Bcrypt cost used when the caller does not pass one from settings.
BCRYPT_ROUNDS = 12
# bcrypt only looks at the first 72 bytes of the password.
BCRYPT_MAX_BYTES = 72

# Min/max lengths for name, email and password validation.
NAME_MIN_LEN = 1
NAME_MAX_LEN = 100
EMAIL_MAX_LEN = 150
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

# 64 random bytes, url-safe base64 encoded (~86 chars).
REFRESH_TOKEN_BYTES = 64


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(
    sub: str | int,
    role: str,
    settings: "Settings",
    now: datetime | None = None,
) -> str:
    """Create a signed JWT access token with sub, role, iss, aud, iat and exp."""
    issued_at = now or utc_now()
    expire = issued_at + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(sub),
        "role": role,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "exp": expire,
        "iat": issued_at,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str, settings: "Settings") -> dict[str, Any]:
    """
    Decode and validate JWT; return payload (sub, role, iss, aud, exp, iat).
    Raises jwt.PyJWTError on bad signature, expiry, issuer or audience.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
        options={"require": ["sub", "exp", "iat", "iss", "aud"]},
    )


def generate_refresh_token() -> str:
    """Opaque, cryptographically random refresh token value."""
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)
