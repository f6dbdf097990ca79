"""Repositories for User and Profile entities."""

from uuid import UUID

from sqlalchemy import func, or_, update
from sqlmodel import col, select

from src.app.models import Profile, Project, User
from src.app.models.base import utc_now
from src.app.models.enums import UserRole
from src.app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User credentials."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email address (case-insensitive)."""
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        """Check if a user with the given email exists."""
        user = await self.get_by_email(email)
        return user is not None


class ProfileRepository(BaseRepository[Profile]):
    """Repository for Profile records."""

    model = Profile

    async def list_by_role(self, role: UserRole) -> list[Profile]:
        """List profiles with the given role, ordered by name."""
        result = await self.session.execute(
            select(Profile).where(Profile.role == role.value).order_by(col(Profile.full_name))
        )
        return list(result.scalars().all())

    async def list_with_emails(
        self,
        role: UserRole | None = None,
        search: str | None = None,
    ) -> list[tuple[Profile, str]]:
        """List profiles joined with their user's email, newest first.

        `search` matches name or email, case-insensitive.
        """
        query = select(Profile, User.email).join(User, col(User.id) == col(Profile.id))
        if role is not None:
            query = query.where(Profile.role == role.value)
        if search:
            query = query.where(
                or_(
                    col(Profile.full_name).icontains(search, autoescape=True),
                    col(User.email).icontains(search, autoescape=True),
                )
            )
        query = query.order_by(col(Profile.created_at).desc())
        result = await self.session.execute(query)
        return [(profile, email) for profile, email in result.all()]

    async def project_counts(self, profile_ids: list[UUID]) -> dict[UUID, int]:
        """Count projects where each profile is the client or the designer."""
        if not profile_ids:
            return {}

        counts: dict[UUID, int] = dict.fromkeys(profile_ids, 0)
        for column in (Project.client_id, Project.designer_id):
            result = await self.session.execute(
                select(column, func.count()).where(col(column).in_(profile_ids)).group_by(column)
            )
            for profile_id, count in result.all():
                counts[profile_id] += count
        return counts

    async def assigned_project_count(self, profile_id: UUID) -> int:
        """Number of projects with this profile as their designer."""
        result = await self.session.execute(
            select(func.count()).select_from(Project).where(Project.designer_id == profile_id)
        )
        return result.scalar_one()

    async def update_role(self, profile_id: UUID, role: UserRole) -> int:
        """Set a profile's role. Returns the number of rows updated."""
        stmt = (
            update(Profile)
            .where(Profile.id == profile_id)  # type: ignore[arg-type]
            .values(role=role.value, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def names_by_id(self, profile_ids: list[UUID]) -> dict[UUID, str]:
        """Map profile ids to full names; unknown ids are omitted."""
        if not profile_ids:
            return {}
        result = await self.session.execute(
            select(Profile.id, Profile.full_name).where(col(Profile.id).in_(profile_ids))
        )
        return {profile_id: name for profile_id, name in result.all()}
