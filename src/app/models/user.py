"""User credentials and profiles."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import UserRole


class User(SQLModel, table=True):
    """Authenticated identity. Holds credentials only; the role lives on Profile."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    hashed_password: str = Field(max_length=255)
    full_name: str | None = Field(default=None, max_length=100)
    # Role requested at signup; consulted once when the profile is provisioned
    signup_role: str | None = Field(default=None, max_length=50)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Profile(SQLModel, table=True):
    """One per user, keyed by the user's id."""

    __tablename__ = "profiles"

    id: UUID = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
    full_name: str = Field(max_length=100)
    role: str = Field(default=UserRole.CLIENT.value, max_length=50, index=True)
    avatar_url: str | None = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def role_enum(self) -> UserRole:
        """Get role as UserRole enum."""
        return UserRole(self.role)
