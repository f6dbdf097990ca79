"""Cryptographic utilities - password hashing, JWT tokens, and token hashing."""

from datetime import UTC, datetime, timedelta
from hashlib import sha256
from typing import Any
from uuid import UUID, uuid4

import argon2
from jose import JWTError, jwt

from src.app.core.config import get_settings


class TokenType:
    """Token type constants carried in the `type` claim."""

    ACCESS = "access"
    REFRESH = "refresh"
    DOWNLOAD = "download"


def hash_token(token: str) -> str:
    """Hash a token using SHA256 for secure storage."""
    return sha256(token.encode()).hexdigest()


def _create_password_hasher() -> argon2.PasswordHasher:
    """Create password hasher with settings from config."""
    settings = get_settings()
    return argon2.PasswordHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )


_password_hasher = _create_password_hasher()

# Verified against when the email is unknown so both paths cost the same.
DUMMY_PASSWORD_HASH = _password_hasher.hash("dummy-password-for-timing")


def hash_password(password: str) -> str:
    """Hash password using Argon2id."""
    return _password_hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify password against hash. Returns False on any error."""
    try:
        _password_hasher.verify(hashed, password)
        return True
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


def _encode(claims: dict[str, Any]) -> str:
    settings = get_settings()
    return jwt.encode(  # type: ignore[no-any-return]
        claims,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def create_access_token(
    subject: str | UUID,
    expires_delta: timedelta | None = None,
) -> tuple[str, datetime]:
    """Create JWT access token. Returns (token, expiry as aware UTC datetime)."""
    settings = get_settings()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)

    token = _encode(
        {
            "sub": str(subject),
            "exp": expire,
            "type": TokenType.ACCESS,
        }
    )
    return token, expire


def create_refresh_token(subject: str | UUID) -> tuple[str, datetime]:
    """Create refresh token. Returns (token, expiry as naive UTC datetime).

    Includes a unique JWT ID (jti) so two tokens minted in the same second for
    the same user still hash differently.
    """
    settings = get_settings()
    expire = datetime.now(UTC) + timedelta(days=settings.refresh_token_expire_days)

    token = _encode(
        {
            "sub": str(subject),
            "exp": expire,
            "type": TokenType.REFRESH,
            "jti": str(uuid4()),
        }
    )
    # Naive datetime for TIMESTAMP WITHOUT TIME ZONE columns
    return token, expire.replace(tzinfo=None)


def create_download_token(path: str, ttl_seconds: int) -> str:
    """Create a short-lived token granting read access to one stored blob."""
    expire = datetime.now(UTC) + timedelta(seconds=ttl_seconds)
    return _encode(
        {
            "sub": path,
            "exp": expire,
            "type": TokenType.DOWNLOAD,
        }
    )


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode and validate JWT token. Returns None on any error."""
    settings = get_settings()
    try:
        return jwt.decode(  # type: ignore[no-any-return]
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
