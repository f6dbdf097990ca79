"""Projects and the files and comments attached to them."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import ProjectStatus


class Project(SQLModel, table=True):
    """A design request owned by its client.

    client_id is written once at creation. designer_id is a non-owning
    reference to a profile with role=designer.
    """

    __tablename__ = "projects"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str = Field(max_length=200, index=True)
    description: str | None = Field(default=None, max_length=5000)
    client_id: UUID = Field(foreign_key="profiles.id", index=True)
    designer_id: UUID | None = Field(
        default=None, foreign_key="profiles.id", index=True, ondelete="SET NULL"
    )
    status: str = Field(default=ProjectStatus.PENDING.value, max_length=20, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def status_enum(self) -> ProjectStatus:
        """Get status as ProjectStatus enum."""
        return ProjectStatus(self.status)


class ProjectFile(SQLModel, table=True):
    """Metadata for a blob attached to a project."""

    __tablename__ = "project_files"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(foreign_key="projects.id", index=True, ondelete="CASCADE")
    file_name: str = Field(max_length=255)
    file_type: str = Field(max_length=255)
    file_size: int
    storage_path: str = Field(max_length=600, unique=True)
    uploaded_by: UUID = Field(foreign_key="profiles.id")
    created_at: datetime = Field(default_factory=utc_now)


class ProjectComment(SQLModel, table=True):
    """Append-only comment on a project."""

    __tablename__ = "project_comments"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(foreign_key="projects.id", index=True, ondelete="CASCADE")
    user_id: UUID = Field(foreign_key="profiles.id")
    content: str = Field(max_length=5000)
    created_at: datetime = Field(default_factory=utc_now)
