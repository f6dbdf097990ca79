"""Identity resolution: session -> (user, profile) -> Principal.

A profile normally exists from registration onward. When one is missing it is
provisioned here, explicitly, and the caller learns which of the two happened.
"""

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.exceptions import NotAuthenticated, PersistenceError
from src.app.core.logging import get_logger
from src.app.core.session import Session
from src.app.models import Profile, User
from src.app.models.enums import UserRole
from src.app.repositories import ProfileRepository, UserRepository
from src.app.services.access_policy import Principal

logger = get_logger(__name__)


class ResolveOutcome(str, Enum):
    FOUND = "found"
    PROVISIONED = "provisioned"


@dataclass(frozen=True)
class Identity:
    user: User
    profile: Profile
    outcome: ResolveOutcome

    @property
    def principal(self) -> Principal:
        return Principal(
            id=self.user.id,
            email=self.user.email,
            role=self.profile.role_enum,
            full_name=self.profile.full_name,
        )


def default_full_name(user: User) -> str:
    """Name used for a provisioned profile: stated name, else email local part."""
    if user.full_name and user.full_name.strip():
        return user.full_name.strip()
    local_part = user.email.split("@", 1)[0]
    return local_part or "User"


def signup_role(user: User) -> UserRole:
    """Role requested at signup, falling back to client for missing or unknown values."""
    try:
        return UserRole(user.signup_role) if user.signup_role else UserRole.CLIENT
    except ValueError:
        logger.warning("Unknown signup role, defaulting to client", user_id=str(user.id))
        return UserRole.CLIENT


def build_profile(user: User) -> Profile:
    return Profile(id=user.id, full_name=default_full_name(user), role=signup_role(user).value)


class IdentityService:
    """Maps an authenticated session to its profile and role."""

    def __init__(
        self,
        user_repo: UserRepository,
        profile_repo: ProfileRepository,
        session: AsyncSession,
    ):
        self.user_repo = user_repo
        self.profile_repo = profile_repo
        self.session = session

    async def resolve(self, auth_session: Session | None) -> Profile:
        """Profile for a session, provisioned if needed."""
        identity = await self.resolve_or_provision(auth_session)
        return identity.profile

    async def resolve_or_provision(self, auth_session: Session | None) -> Identity:
        """Look up the session's profile; create it when absent.

        Raises:
            NotAuthenticated: no session, or the user is gone or inactive
            PersistenceError: the provisioning write failed
        """
        if auth_session is None:
            raise NotAuthenticated()

        user = await self.user_repo.get_by_id(auth_session.user_id)
        if user is None or not user.is_active:
            raise NotAuthenticated()

        profile = await self.profile_repo.get_by_id(user.id)
        if profile is not None:
            return Identity(user=user, profile=profile, outcome=ResolveOutcome.FOUND)

        profile = build_profile(user)
        self.profile_repo.add(profile)
        try:
            await self.session.commit()
        except IntegrityError:
            # Another request provisioned the same profile first
            await self.session.rollback()
            existing = await self.profile_repo.get_by_id(user.id)
            if existing is None:
                raise PersistenceError("Could not provision profile") from None
            return Identity(user=user, profile=existing, outcome=ResolveOutcome.FOUND)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(str(e)) from e

        logger.info("Profile provisioned", user_id=str(user.id), role=profile.role)
        return Identity(user=user, profile=profile, outcome=ResolveOutcome.PROVISIONED)
