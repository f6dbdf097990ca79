"""Security utilities - crypto and HTTP headers.

Re-exports all security-related functions for convenience.
"""

from src.app.core.security.crypto import (
    DUMMY_PASSWORD_HASH,
    TokenType,
    create_access_token,
    create_download_token,
    create_refresh_token,
    decode_token,
    hash_password,
    hash_token,
    verify_password,
)
from src.app.core.security.headers import SecurityHeadersMiddleware

__all__ = [
    # Crypto
    "DUMMY_PASSWORD_HASH",
    "TokenType",
    "create_access_token",
    "create_download_token",
    "create_refresh_token",
    "decode_token",
    "hash_password",
    "hash_token",
    "verify_password",
    # Headers
    "SecurityHeadersMiddleware",
]
