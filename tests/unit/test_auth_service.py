"""Tests for registration, login, refresh rotation and logout."""

import pytest
from sqlalchemy.exc import IntegrityError

from src.app.core.exceptions import Conflict, NotAuthenticated
from src.app.core.security import create_access_token, decode_token, hash_token
from src.app.core.session import Session
from src.app.models.enums import UserRole
from src.app.schemas.auth import RegisterRequest
from tests.factories import DEFAULT_TEST_PASSWORD, UserFactory

pytestmark = pytest.mark.unit


@pytest.fixture
def published(events) -> list[Session | None]:
    """Every session change published during the test."""
    changes: list[Session | None] = []
    events.on_session_change(changes.append)
    return changes


@pytest.fixture
def registered(db):
    user = UserFactory.build(email="lena@example.com")
    db.seed(user)
    return user


def register_request(**overrides) -> RegisterRequest:
    data = {
        "email": "New.Person@Example.com",
        "password": DEFAULT_TEST_PASSWORD,
        "full_name": "New Person",
        "role": UserRole.DESIGNER,
    }
    data.update(overrides)
    return RegisterRequest(**data)


class TestRegister:
    async def test_creates_user_and_profile(self, auth_service, db):
        user, profile = await auth_service.register(register_request())

        assert user.email == "new.person@example.com"
        assert user.hashed_password != DEFAULT_TEST_PASSWORD
        assert profile.id == user.id
        assert profile.role == UserRole.DESIGNER.value
        assert db.users[user.id] is user
        assert db.profiles[user.id] is profile

    async def test_duplicate_email(self, auth_service, registered, db):
        with pytest.raises(Conflict):
            await auth_service.register(register_request(email="LENA@example.com"))

        assert len(db.users) == 1

    async def test_unique_violation_on_commit(self, auth_service, db):
        db.session.fail_on_commit = IntegrityError("INSERT", {}, Exception("duplicate key"))

        with pytest.raises(Conflict):
            await auth_service.register(register_request())

        assert db.users == {}
        assert db.session.rollbacks == 1


class TestLogin:
    async def test_issues_tokens_and_publishes_session(self, auth_service, registered, published):
        tokens = await auth_service.login("lena@example.com", DEFAULT_TEST_PASSWORD)

        assert decode_token(tokens.access_token)["sub"] == str(registered.id)
        assert tokens.token_type == "bearer"
        assert len(published) == 1
        assert published[0].user_id == registered.id

    async def test_refresh_token_is_stored_by_hash(self, auth_service, registered, db):
        tokens = await auth_service.login("lena@example.com", DEFAULT_TEST_PASSWORD)

        [stored] = db.tokens.values()
        assert stored.token_hash == hash_token(tokens.refresh_token)
        assert stored.user_id == registered.id

    @pytest.mark.parametrize(
        ("email", "password"),
        [
            ("lena@example.com", "wrong-password"),
            ("nobody@example.com", DEFAULT_TEST_PASSWORD),
        ],
    )
    async def test_bad_credentials(self, auth_service, registered, published, email, password):
        with pytest.raises(NotAuthenticated, match="Invalid email or password"):
            await auth_service.login(email, password)

        assert published == []

    async def test_inactive_user(self, auth_service, db):
        user = UserFactory.inactive(email="gone@example.com")
        db.seed(user)

        with pytest.raises(NotAuthenticated):
            await auth_service.login("gone@example.com", DEFAULT_TEST_PASSWORD)


class TestRefresh:
    async def test_rotates_refresh_token(self, auth_service, registered, db):
        first = await auth_service.login("lena@example.com", DEFAULT_TEST_PASSWORD)

        second = await auth_service.refresh(first.refresh_token)

        assert second.refresh_token != first.refresh_token
        by_hash = {t.token_hash: t for t in db.tokens.values()}
        assert by_hash[hash_token(first.refresh_token)].revoked is True
        assert by_hash[hash_token(second.refresh_token)].revoked is False

    async def test_replayed_token_is_rejected(self, auth_service, registered):
        tokens = await auth_service.login("lena@example.com", DEFAULT_TEST_PASSWORD)
        await auth_service.refresh(tokens.refresh_token)

        with pytest.raises(NotAuthenticated):
            await auth_service.refresh(tokens.refresh_token)

    async def test_access_token_cannot_refresh(self, auth_service, registered):
        access_token, _ = create_access_token(registered.id)

        with pytest.raises(NotAuthenticated):
            await auth_service.refresh(access_token)

    async def test_garbage_token(self, auth_service):
        with pytest.raises(NotAuthenticated):
            await auth_service.refresh("not-a-jwt")


class TestLogout:
    async def test_revokes_and_publishes_none(self, auth_service, registered, db, published):
        tokens = await auth_service.login("lena@example.com", DEFAULT_TEST_PASSWORD)

        assert await auth_service.logout(tokens.refresh_token) is True

        [stored] = db.tokens.values()
        assert stored.revoked is True
        assert published[-1] is None

    async def test_unknown_token_still_publishes(self, auth_service, published):
        assert await auth_service.logout("unknown") is False
        assert published == [None]
