"""User endpoints: own profile, user directory and role administration."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query

from src.app.api.dependencies import CurrentIdentity, CurrentPrincipal, UserServiceDep
from src.app.models.enums import UserRole
from src.app.schemas.user import MeRead, ProfileRead, ProfileUpdate, RoleUpdate, UserWithStats
from src.app.services import ResolveOutcome

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/me",
    response_model=MeRead,
    responses={
        200: {
            "description": "Current user's profile",
            "content": {
                "application/json": {
                    "example": {
                        "id": "550e8400-e29b-41d4-a716-446655440000",
                        "email": "ana@example.com",
                        "full_name": "Ana Ruiz",
                        "role": "client",
                        "avatar_url": None,
                        "provisioned": False,
                        "created_at": "2025-01-15T10:30:00",
                        "updated_at": "2025-01-15T10:30:00",
                    }
                }
            },
        },
        401: {"description": "Not authenticated"},
    },
)
async def get_me(identity: CurrentIdentity) -> MeRead:
    """Current profile; created on the spot if the user has none yet."""
    profile = ProfileRead.model_validate(identity.profile)
    return MeRead(
        **profile.model_dump(),
        email=identity.user.email,
        provisioned=identity.outcome is ResolveOutcome.PROVISIONED,
    )


@router.patch(
    "/me",
    response_model=ProfileRead,
    responses={
        200: {"description": "Profile updated"},
        401: {"description": "Not authenticated"},
        422: {"description": "Validation error"},
    },
)
async def update_me(
    data: ProfileUpdate,
    principal: CurrentPrincipal,
    service: UserServiceDep,
) -> ProfileRead:
    """Update own name or avatar. The role cannot be changed here."""
    profile = await service.update_me(principal, data)
    return ProfileRead.model_validate(profile)


@router.get(
    "",
    response_model=list[UserWithStats],
    responses={
        200: {"description": "All users with their project counts"},
        403: {"description": "Caller is not a project manager"},
    },
)
async def list_users(
    principal: CurrentPrincipal,
    service: UserServiceDep,
    role: Annotated[UserRole | None, Query(description="Only users with this role")] = None,
    search: Annotated[
        str | None, Query(max_length=100, description="Match name or email")
    ] = None,
) -> list[UserWithStats]:
    """User directory for project managers."""
    return await service.list_users(principal, role=role, search=search)


@router.get(
    "/designers",
    response_model=list[ProfileRead],
    responses={403: {"description": "Caller is not a project manager"}},
)
async def list_designers(principal: CurrentPrincipal, service: UserServiceDep) -> list[ProfileRead]:
    """Designers available for assignment, ordered by name."""
    designers = await service.list_designers(principal)
    return [ProfileRead.model_validate(d) for d in designers]


@router.patch(
    "/{user_id}/role",
    response_model=ProfileRead,
    responses={
        200: {"description": "Role changed"},
        403: {"description": "Caller is not a project manager"},
        404: {"description": "User not found"},
        409: {"description": "Designer still assigned to projects"},
    },
)
async def edit_user_role(
    user_id: UUID,
    data: RoleUpdate,
    principal: CurrentPrincipal,
    service: UserServiceDep,
) -> ProfileRead:
    """Change a user's role."""
    profile = await service.edit_user_role(principal, user_id, data.role)
    return ProfileRead.model_validate(profile)
