"""User and auth endpoints through the HTTP stack."""

import pytest

from src.app.core.security import create_access_token
from tests.factories import DEFAULT_TEST_PASSWORD, ProjectFactory, UserFactory
from tests.helpers import bearer

pytestmark = pytest.mark.api


class TestMe:
    async def test_existing_profile(self, api_client, designer_profile):
        response = await api_client.get("/api/v1/users/me", headers=bearer(designer_profile))

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "dana@example.com"
        assert data["role"] == "designer"
        assert data["provisioned"] is False

    async def test_profile_is_provisioned_on_first_use(self, api_client, db):
        user = UserFactory.build(email="late@example.com", full_name=None)
        db.seed(user)
        token, _ = create_access_token(user.id)
        headers = {"Authorization": f"Bearer {token}"}

        first = await api_client.get("/api/v1/users/me", headers=headers)
        second = await api_client.get("/api/v1/users/me", headers=headers)

        assert first.json()["provisioned"] is True
        assert first.json()["full_name"] == "late"
        assert first.json()["role"] == "client"
        assert second.json()["provisioned"] is False

    async def test_update_me(self, api_client, client_profile):
        response = await api_client.patch(
            "/api/v1/users/me",
            json={"full_name": "Ana Lima", "role": "project_manager"},
            headers=bearer(client_profile),
        )

        assert response.status_code == 200
        assert response.json()["full_name"] == "Ana Lima"
        assert response.json()["role"] == "client"


class TestDirectory:
    async def test_manager_lists_users(self, api_client, manager_profile, designer_profile):
        response = await api_client.get(
            "/api/v1/users", params={"role": "designer"}, headers=bearer(manager_profile)
        )

        assert response.status_code == 200
        assert [u["email"] for u in response.json()] == ["dana@example.com"]
        assert response.json()[0]["projects_count"] == 0

    async def test_client_cannot_list_users(self, api_client, client_profile):
        response = await api_client.get("/api/v1/users", headers=bearer(client_profile))

        assert response.status_code == 403

    async def test_designers_for_assignment(
        self, api_client, manager_profile, designer_profile, other_designer_profile
    ):
        response = await api_client.get(
            "/api/v1/users/designers", headers=bearer(manager_profile)
        )

        assert [d["full_name"] for d in response.json()] == ["Dana Designer", "Diego Designer"]

    async def test_manager_changes_role(self, api_client, manager_profile, client_profile, db):
        response = await api_client.patch(
            f"/api/v1/users/{client_profile.id}/role",
            json={"role": "designer"},
            headers=bearer(manager_profile),
        )

        assert response.status_code == 200
        assert db.profiles[client_profile.id].role == "designer"

    async def test_assigned_designer_demotion_is_409(
        self, api_client, db, manager_profile, designer_profile, client_profile
    ):
        db.seed(ProjectFactory.assigned(designer_profile.id, client_id=client_profile.id))

        response = await api_client.patch(
            f"/api/v1/users/{designer_profile.id}/role",
            json={"role": "client"},
            headers=bearer(manager_profile),
        )

        assert response.status_code == 409
        assert db.profiles[designer_profile.id].role == "designer"

    async def test_designer_cannot_change_role(self, api_client, designer_profile, client_profile):
        response = await api_client.patch(
            f"/api/v1/users/{client_profile.id}/role",
            json={"role": "project_manager"},
            headers=bearer(designer_profile),
        )

        assert response.status_code == 403


class TestAuthFlow:
    async def test_register_login_refresh_logout(self, api_client, db):
        registered = await api_client.post(
            "/api/v1/auth/register",
            json={
                "email": "Zoe@Example.com",
                "password": DEFAULT_TEST_PASSWORD,
                "full_name": "Zoe Park",
                "role": "designer",
            },
        )
        assert registered.status_code == 201
        assert registered.json()["email"] == "zoe@example.com"
        assert registered.json()["profile"]["role"] == "designer"
        assert registered.headers["Cache-Control"] == "no-store"

        login = await api_client.post(
            "/api/v1/auth/login",
            json={"email": "zoe@example.com", "password": DEFAULT_TEST_PASSWORD},
        )
        assert login.status_code == 200
        tokens = login.json()

        me = await api_client.get(
            "/api/v1/users/me", headers={"Authorization": f"Bearer {tokens['access_token']}"}
        )
        assert me.json()["full_name"] == "Zoe Park"

        refreshed = await api_client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
        )
        assert refreshed.status_code == 200

        replayed = await api_client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
        )
        assert replayed.status_code == 401

        logout = await api_client.post(
            "/api/v1/auth/logout", json={"refresh_token": refreshed.json()["refresh_token"]}
        )
        assert logout.status_code == 204

    async def test_duplicate_registration_is_409(self, api_client, client_profile):
        response = await api_client.post(
            "/api/v1/auth/register",
            json={
                "email": "ana@example.com",
                "password": DEFAULT_TEST_PASSWORD,
                "full_name": "Ana Again",
            },
        )

        assert response.status_code == 409
        assert response.json()["request_id"]

    async def test_wrong_password_is_401(self, api_client, client_profile):
        response = await api_client.post(
            "/api/v1/auth/login", json={"email": "ana@example.com", "password": "nope"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"
