"""Tests for the user directory and role management."""

from uuid import uuid4

import pytest

from src.app.core.exceptions import Conflict, NotFound, PermissionDenied
from src.app.models.enums import UserRole
from src.app.schemas.user import ProfileUpdate
from tests.factories import ProjectFactory

pytestmark = pytest.mark.unit


@pytest.fixture
def everyone(
    client_profile, other_client_profile, designer_profile, other_designer_profile, manager_profile
):
    return [
        client_profile,
        other_client_profile,
        designer_profile,
        other_designer_profile,
        manager_profile,
    ]


class TestListUsers:
    async def test_manager_sees_all_with_project_counts(
        self, user_service, manager, everyone, client_profile, designer_profile, db
    ):
        db.seed(
            ProjectFactory.assigned(designer_profile.id, client_id=client_profile.id),
            ProjectFactory.build(client_id=client_profile.id),
        )

        users = await user_service.list_users(manager)

        by_email = {u.email: u for u in users}
        assert len(users) == 5
        assert by_email["ana@example.com"].projects_count == 2
        assert by_email["dana@example.com"].projects_count == 1
        assert by_email["marta@example.com"].projects_count == 0

    async def test_filters_by_role_and_search(self, user_service, manager, everyone):
        designers = await user_service.list_users(manager, role=UserRole.DESIGNER)
        diego = await user_service.list_users(manager, search="diego")

        assert {u.full_name for u in designers} == {"Dana Designer", "Diego Designer"}
        assert [u.email for u in diego] == ["diego@example.com"]

    @pytest.mark.parametrize("who", ["client", "designer"])
    async def test_non_managers_are_denied(self, request, user_service, who):
        with pytest.raises(PermissionDenied):
            await user_service.list_users(request.getfixturevalue(who))


class TestListDesigners:
    async def test_sorted_by_name(self, user_service, manager, everyone):
        designers = await user_service.list_designers(manager)

        assert [d.full_name for d in designers] == ["Dana Designer", "Diego Designer"]

    async def test_client_is_denied(self, user_service, client):
        with pytest.raises(PermissionDenied):
            await user_service.list_designers(client)


class TestEditUserRole:
    async def test_manager_promotes_client(self, user_service, manager, client_profile, db):
        profile = await user_service.edit_user_role(manager, client_profile.id, UserRole.DESIGNER)

        assert profile.role == UserRole.DESIGNER.value
        assert db.profiles[client_profile.id].role == UserRole.DESIGNER.value
        assert db.session.commits == 1

    async def test_unknown_user(self, user_service, manager):
        with pytest.raises(NotFound):
            await user_service.edit_user_role(manager, uuid4(), UserRole.DESIGNER)

    async def test_designer_cannot_change_roles(self, user_service, designer, client_profile, db):
        with pytest.raises(PermissionDenied):
            await user_service.edit_user_role(
                designer, client_profile.id, UserRole.PROJECT_MANAGER
            )

        assert db.profiles[client_profile.id].role == UserRole.CLIENT.value

    async def test_assigned_designer_keeps_role(
        self, user_service, manager, designer_profile, client_profile, db
    ):
        db.seed(ProjectFactory.assigned(designer_profile.id, client_id=client_profile.id))

        with pytest.raises(Conflict, match="assigned to 1 project"):
            await user_service.edit_user_role(manager, designer_profile.id, UserRole.CLIENT)

        assert db.profiles[designer_profile.id].role == UserRole.DESIGNER.value
        assert db.session.commits == 0

    async def test_unassigned_designer_can_be_demoted(
        self, user_service, manager, designer_profile, db
    ):
        await user_service.edit_user_role(manager, designer_profile.id, UserRole.CLIENT)

        assert db.profiles[designer_profile.id].role == UserRole.CLIENT.value


class TestUpdateMe:
    async def test_updates_name_and_avatar(self, user_service, client, client_profile):
        profile = await user_service.update_me(
            client, ProfileUpdate(full_name=" Ana B. ", avatar_url="https://cdn.test/a.png")
        )

        assert profile is client_profile
        assert profile.full_name == "Ana B."
        assert profile.avatar_url == "https://cdn.test/a.png"

    async def test_null_name_is_ignored(self, user_service, client, client_profile):
        await user_service.update_me(client, ProfileUpdate(full_name=None))

        assert client_profile.full_name == "Ana Client"

    async def test_avatar_can_be_cleared(self, user_service, client, client_profile):
        client_profile.avatar_url = "https://cdn.test/old.png"

        await user_service.update_me(client, ProfileUpdate(avatar_url=None))

        assert client_profile.avatar_url is None
