"""Test utilities package."""

from tests.utils.cleanup import cleanup_user_cascade

__all__ = [
    "cleanup_user_cascade",
]
