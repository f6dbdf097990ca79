"""HTTP test fixtures.

The app is built per test with its service dependencies overridden by the
fake-backed services from tests/conftest.py, so requests run end to end
through middleware, auth and exception handlers without a database.
"""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.app.api.dependencies import (
    get_auth_service,
    get_identity_service,
    get_lifecycle_service,
    get_project_service,
    get_user_service,
)
from src.app.core.storage import get_blob_store
from src.app.main import create_app


@pytest.fixture
def app(
    identity_service,
    auth_service,
    user_service,
    project_service,
    lifecycle_service,
    blob_store,
) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_identity_service] = lambda: identity_service
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    app.dependency_overrides[get_user_service] = lambda: user_service
    app.dependency_overrides[get_project_service] = lambda: project_service
    app.dependency_overrides[get_lifecycle_service] = lambda: lifecycle_service
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    return app


@pytest.fixture
async def api_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
