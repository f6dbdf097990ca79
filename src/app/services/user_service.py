from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.exceptions import Conflict, NotFound, PermissionDenied, PersistenceError
from src.app.core.logging import get_logger
from src.app.models import Profile
from src.app.models.base import touch
from src.app.models.enums import UserRole
from src.app.repositories import ProfileRepository
from src.app.schemas.user import ProfileUpdate, UserWithStats
from src.app.services.access_policy import Action, Principal, authorize

logger = get_logger(__name__)


class UserService:
    """User directory and profile management."""

    def __init__(self, profile_repo: ProfileRepository, session: AsyncSession):
        self.profile_repo = profile_repo
        self.session = session

    async def list_users(
        self,
        principal: Principal,
        role: UserRole | None = None,
        search: str | None = None,
    ) -> list[UserWithStats]:
        """Every user with email and how many projects they take part in. Managers only."""
        if not principal.is_manager:
            raise PermissionDenied("Only project managers can view the user directory")

        rows = await self.profile_repo.list_with_emails(role=role, search=search)
        counts = await self.profile_repo.project_counts([profile.id for profile, _ in rows])
        return [
            UserWithStats(
                id=profile.id,
                full_name=profile.full_name,
                role=profile.role_enum,
                avatar_url=profile.avatar_url,
                created_at=profile.created_at,
                updated_at=profile.updated_at,
                email=email,
                projects_count=counts.get(profile.id, 0),
            )
            for profile, email in rows
        ]

    async def list_designers(self, principal: Principal) -> list[Profile]:
        """Designers ordered by name, for the assignment picker. Managers only."""
        if not principal.is_manager:
            raise PermissionDenied("Only project managers can list designers")
        return await self.profile_repo.list_by_role(UserRole.DESIGNER)

    async def edit_user_role(self, principal: Principal, user_id: UUID, role: UserRole) -> Profile:
        """Change another user's role.

        Raises:
            PermissionDenied: caller is not a project manager
            NotFound: no profile with that id
            Conflict: the user is a designer still assigned to projects and
                would lose the designer role
        """
        authorize(principal, Action.EDIT_USER_ROLE)

        profile = await self.profile_repo.get_by_id(user_id)
        if profile is None:
            raise NotFound("User not found")

        if profile.role_enum is UserRole.DESIGNER and role is not UserRole.DESIGNER:
            assigned = await self.profile_repo.assigned_project_count(user_id)
            if assigned:
                raise Conflict(
                    f"Designer is still assigned to {assigned} project(s); unassign them first"
                )

        try:
            updated = await self.profile_repo.update_role(user_id, role)
            if updated == 0:
                await self.session.rollback()
                raise NotFound("User not found")
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(str(e)) from e

        previous = profile.role
        profile.role = role.value
        touch(profile)
        logger.info(
            "User role changed",
            target_user_id=str(user_id),
            old_role=previous,
            new_role=role.value,
        )
        return profile

    async def update_me(self, principal: Principal, data: ProfileUpdate) -> Profile:
        """Update the caller's own name or avatar."""
        profile = await self.profile_repo.get_by_id(principal.id)
        if profile is None:
            raise NotFound("Profile not found")

        changes = data.model_dump(exclude_unset=True)
        # A name can be changed but not cleared; the avatar can be cleared
        if changes.get("full_name") is None:
            changes.pop("full_name", None)
        for field, value in changes.items():
            setattr(profile, field, value)
        touch(profile)

        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(str(e)) from e
        await self.session.refresh(profile)
        return profile
