"""Rate limiting for credential endpoints (slowapi, per client IP).

Storage is in-memory per process; put a shared limiter in front of the API
when running more than one worker.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.app.core.config import get_settings
from src.app.core.logging import get_logger

logger = get_logger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """Rate limit key from client IP only.

    Never derive the key from user-controlled headers: rotating them would
    mint unlimited fresh buckets.
    """
    return get_remote_address(request) or "unknown"


def create_limiter() -> Limiter:
    """Create the limiter; disabled in the testing environment."""
    settings = get_settings()

    if settings.app_env == "testing":
        logger.info("Rate limiter disabled (testing environment)")
        return Limiter(key_func=get_rate_limit_key, enabled=False)

    return Limiter(key_func=get_rate_limit_key, default_limits=[])


# Reads settings at import time; reconfiguration requires a restart.
limiter = create_limiter()


def auth_rate_limit() -> str:
    """Limit string applied to login/register/refresh."""
    return get_settings().auth_rate_limit
