"""Project schemas for API request/response."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.app.models.enums import ProjectStatus

MAX_TITLE_LENGTH = 200
MAX_TEXT_LENGTH = 5000


class ProjectCreate(BaseModel):
    """Schema for creating a project."""

    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str | None = Field(default=None, max_length=MAX_TEXT_LENGTH)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Project title cannot be empty or whitespace only")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v


class ProjectUpdate(BaseModel):
    """Schema for editing a project's title or description."""

    title: str | None = Field(default=None, min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str | None = Field(default=None, max_length=MAX_TEXT_LENGTH)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Project title cannot be empty or whitespace only")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v


class ProjectRead(BaseModel):
    """Schema for reading a project."""

    id: UUID
    title: str
    description: str | None
    client_id: UUID
    designer_id: UUID | None
    status: ProjectStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProjectListItem(ProjectRead):
    """A project row with its participants' names filled in."""

    client_name: str | None = None
    designer_name: str | None = None


class AssignDesignerRequest(BaseModel):
    designer_id: UUID


class StatusChangeRequest(BaseModel):
    status: ProjectStatus


class FileRead(BaseModel):
    id: UUID
    project_id: UUID
    file_name: str
    file_type: str
    file_size: int
    uploaded_by: UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class DownloadLink(BaseModel):
    url: str
    expires_in: int


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=MAX_TEXT_LENGTH)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment cannot be empty or whitespace only")
        return v


class CommentRead(BaseModel):
    id: UUID
    project_id: UUID
    user_id: UUID
    content: str
    created_at: datetime
    author_name: str | None = None
    author_avatar_url: str | None = None


class DashboardRead(BaseModel):
    """Recent projects plus how many visible projects sit in each status."""

    recent_projects: list[ProjectListItem]
    status_counts: dict[ProjectStatus, int]
    total: int


class DeleteProjectResult(BaseModel):
    project_id: UUID
    files_removed: int
    blob_failures: list[str] = Field(
        default_factory=list,
        description="Storage paths whose blobs could not be removed.",
    )
