"""Test helper functions shared by API tests."""

from src.app.core.security import create_access_token
from src.app.models import Profile


def bearer(profile: Profile) -> dict[str, str]:
    """Authorization header carrying a fresh access token for the profile's user."""
    token, _ = create_access_token(profile.id)
    return {"Authorization": f"Bearer {token}"}
