from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.app.models.enums import UserRole


class ProfileRead(BaseModel):
    id: UUID
    full_name: str
    role: UserRole
    avatar_url: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MeRead(ProfileRead):
    """The caller's own profile, with how it was resolved."""

    email: str
    provisioned: bool = Field(
        default=False,
        description="True when the profile was created by this request.",
    )


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile. Role is not one of them."""

    full_name: str | None = Field(default=None, min_length=1, max_length=100)
    avatar_url: str | None = Field(default=None, max_length=500)

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Full name cannot be empty or whitespace only")
        return v


class UserWithStats(ProfileRead):
    email: str
    projects_count: int


class RoleUpdate(BaseModel):
    role: UserRole
