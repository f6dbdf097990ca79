"""Repositories for Project, ProjectFile and ProjectComment."""

from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, update
from sqlmodel import col, select

from src.app.models import Profile, Project, ProjectComment, ProjectFile
from src.app.models.enums import ProjectStatus
from src.app.repositories.base import BaseRepository


def _scoped(query: Any, client_id: UUID | None, designer_id: UUID | None) -> Any:
    if client_id is not None:
        query = query.where(Project.client_id == client_id)
    if designer_id is not None:
        query = query.where(Project.designer_id == designer_id)
    return query


class ProjectRepository(BaseRepository[Project]):
    """Repository for Project entity.

    `client_id` / `designer_id` arguments narrow a query to one participant's
    projects; leaving both unset covers every project.
    """

    model = Project

    async def list_scoped(
        self,
        client_id: UUID | None = None,
        designer_id: UUID | None = None,
        status: ProjectStatus | None = None,
        search: str | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[Project], str | None, bool]:
        """List projects newest first with cursor-based pagination.

        `search` matches the title, case-insensitive.
        """
        query = _scoped(select(Project), client_id, designer_id)
        if status is not None:
            query = query.where(Project.status == status.value)
        if search:
            query = query.where(col(Project.title).icontains(search, autoescape=True))
        return await self.paginate(query, cursor, limit, Project.created_at)

    async def recent(
        self,
        client_id: UUID | None = None,
        designer_id: UUID | None = None,
        limit: int = 5,
    ) -> list[Project]:
        """Most recently created projects."""
        query = _scoped(select(Project), client_id, designer_id)
        query = query.order_by(col(Project.created_at).desc()).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def status_counts(
        self,
        client_id: UUID | None = None,
        designer_id: UUID | None = None,
    ) -> dict[ProjectStatus, int]:
        """Number of projects per status; every status is present."""
        query = _scoped(select(Project.status, func.count()), client_id, designer_id)
        result = await self.session.execute(query.group_by(Project.status))
        counts = dict.fromkeys(ProjectStatus, 0)
        for status, count in result.all():
            counts[ProjectStatus(status)] = count
        return counts

    async def update_fields(self, project_id: UUID, values: dict[str, Any]) -> int:
        """Issue a single UPDATE for one project. Returns the number of rows updated.

        Loaded instances are left untouched; callers apply the values once the
        transaction commits.
        """
        stmt = (
            update(Project)
            .where(Project.id == project_id)  # type: ignore[arg-type]
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def delete_by_id(self, project_id: UUID) -> int:
        """Delete one project row. Returns the number of rows deleted."""
        result = await self.session.execute(
            delete(Project).where(Project.id == project_id)  # type: ignore[arg-type]
        )
        return result.rowcount or 0  # type: ignore[attr-defined]


class ProjectFileRepository(BaseRepository[ProjectFile]):
    """Repository for files attached to projects."""

    model = ProjectFile

    async def list_for_project(self, project_id: UUID) -> list[ProjectFile]:
        """Files of a project, newest first."""
        result = await self.session.execute(
            select(ProjectFile)
            .where(ProjectFile.project_id == project_id)
            .order_by(col(ProjectFile.created_at).desc())
        )
        return list(result.scalars().all())

    async def get_for_project(self, project_id: UUID, file_id: UUID) -> ProjectFile | None:
        """Get a file only if it belongs to the given project."""
        result = await self.session.execute(
            select(ProjectFile).where(
                ProjectFile.id == file_id,
                ProjectFile.project_id == project_id,
            )
        )
        return result.scalar_one_or_none()

    async def delete_for_project(self, project_id: UUID) -> int:
        """Delete every file row of a project. Returns the number deleted."""
        result = await self.session.execute(
            delete(ProjectFile).where(ProjectFile.project_id == project_id)  # type: ignore[arg-type]
        )
        return result.rowcount or 0  # type: ignore[attr-defined]


class ProjectCommentRepository(BaseRepository[ProjectComment]):
    """Repository for project comments."""

    model = ProjectComment

    async def list_with_authors(
        self, project_id: UUID
    ) -> list[tuple[ProjectComment, str | None, str | None]]:
        """Comments oldest first, each with its author's name and avatar."""
        result = await self.session.execute(
            select(ProjectComment, Profile.full_name, Profile.avatar_url)
            .join(Profile, col(Profile.id) == col(ProjectComment.user_id), isouter=True)
            .where(ProjectComment.project_id == project_id)
            .order_by(col(ProjectComment.created_at))
        )
        return [(comment, name, avatar) for comment, name, avatar in result.all()]

    async def delete_for_project(self, project_id: UUID) -> int:
        """Delete every comment of a project. Returns the number deleted."""
        result = await self.session.execute(
            delete(ProjectComment).where(ProjectComment.project_id == project_id)  # type: ignore[arg-type]
        )
        return result.rowcount or 0  # type: ignore[attr-defined]
