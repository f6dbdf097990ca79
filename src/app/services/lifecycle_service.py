"""Project lifecycle: designer assignment, status changes, edits and deletion.

Every transition is manager-only and is checked before anything is written.
Each mutation is one UPDATE committed on its own; the in-memory project is
only changed after the commit succeeds.
"""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.exceptions import DesignerNotFound, NotFound, PartialFailure, PersistenceError
from src.app.core.logging import get_logger
from src.app.core.notifications import NotificationKind, NotificationSink, notify
from src.app.core.storage import BlobStore, BlobStoreError
from src.app.models import Project
from src.app.models.base import utc_now
from src.app.models.enums import ProjectStatus, UserRole
from src.app.repositories import (
    ProfileRepository,
    ProjectCommentRepository,
    ProjectFileRepository,
    ProjectRepository,
)
from src.app.schemas.project import ProjectUpdate
from src.app.services.access_policy import Action, Principal, authorize

logger = get_logger(__name__)


@dataclass
class DeletionResult:
    """Outcome of a project deletion; rows are always gone, blobs may linger."""

    project_id: UUID
    files_removed: int
    comments_removed: int
    partial_failure: PartialFailure | None = None
    failed_paths: list[str] = field(default_factory=list)


def status_after_assignment(current: ProjectStatus) -> ProjectStatus:
    """Assignment starts pending work and leaves every other status alone."""
    if current is ProjectStatus.PENDING:
        return ProjectStatus.IN_PROGRESS
    return current


class ProjectLifecycleService:
    def __init__(
        self,
        project_repo: ProjectRepository,
        file_repo: ProjectFileRepository,
        comment_repo: ProjectCommentRepository,
        profile_repo: ProfileRepository,
        session: AsyncSession,
        blob_store: BlobStore,
        sink: NotificationSink,
    ):
        self.project_repo = project_repo
        self.file_repo = file_repo
        self.comment_repo = comment_repo
        self.profile_repo = profile_repo
        self.session = session
        self.blob_store = blob_store
        self.sink = sink

    async def assign_designer(
        self, principal: Principal, project: Project, designer_id: UUID
    ) -> Project:
        """Assign a designer; a pending project moves to in_progress.

        Raises:
            PermissionDenied: caller is not a project manager
            DesignerNotFound: designer_id is not a profile with role=designer
        """
        authorize(principal, Action.ASSIGN_DESIGNER, project)

        designer = await self.profile_repo.get_by_id(designer_id)
        if designer is None or designer.role_enum is not UserRole.DESIGNER:
            raise DesignerNotFound("Designer not found")

        new_status = status_after_assignment(project.status_enum)
        await self._apply(
            project,
            {"designer_id": designer_id, "status": new_status.value},
            failure_message="Could not assign designer",
        )
        logger.info(
            "Designer assigned",
            project_id=str(project.id),
            designer_id=str(designer_id),
            status=new_status.value,
        )
        notify(self.sink, "Designer assigned", NotificationKind.SUCCESS)
        return project

    async def unassign_designer(self, principal: Principal, project: Project) -> Project:
        """Remove the designer and return the project to pending, whatever its status."""
        authorize(principal, Action.ASSIGN_DESIGNER, project)

        previous = project.designer_id
        await self._apply(
            project,
            {"designer_id": None, "status": ProjectStatus.PENDING.value},
            failure_message="Could not unassign designer",
        )
        logger.info(
            "Designer unassigned",
            project_id=str(project.id),
            designer_id=str(previous) if previous else None,
        )
        notify(self.sink, "Designer unassigned", NotificationKind.SUCCESS)
        return project

    async def change_status(
        self, principal: Principal, project: Project, new_status: ProjectStatus
    ) -> Project:
        """Set the status directly.

        Any status may follow any other, and in_progress is accepted without a
        designer; only assignment guarantees one.
        """
        authorize(principal, Action.CHANGE_STATUS, project)

        previous = project.status
        await self._apply(
            project,
            {"status": new_status.value},
            failure_message="Could not update project status",
        )
        logger.info(
            "Project status changed",
            project_id=str(project.id),
            old_status=previous,
            new_status=new_status.value,
        )
        notify(self.sink, "Project status updated", NotificationKind.SUCCESS)
        return project

    async def edit_project(
        self, principal: Principal, project: Project, data: ProjectUpdate
    ) -> Project:
        """Update title and/or description."""
        authorize(principal, Action.EDIT_PROJECT, project)

        values = data.model_dump(exclude_unset=True)
        if values.get("title") is None:
            values.pop("title", None)
        if not values:
            return project

        await self._apply(project, values, failure_message="Could not update project")
        logger.info("Project edited", project_id=str(project.id), fields=sorted(values))
        return project

    async def delete_project(self, principal: Principal, project: Project) -> DeletionResult:
        """Delete a project with its files and comments.

        Blobs go first and best-effort: a storage failure is logged as a
        PartialFailure and the rows are deleted anyway. Rows are deleted in
        one transaction.
        """
        authorize(principal, Action.DELETE_PROJECT, project)

        files = await self.file_repo.list_for_project(project.id)
        paths = [f.storage_path for f in files]

        result = DeletionResult(project_id=project.id, files_removed=0, comments_removed=0)
        if paths:
            try:
                await self.blob_store.remove(paths)
            except BlobStoreError as e:
                result.partial_failure = PartialFailure(f"Could not remove stored files: {e}")
                # A store that cannot name the keys left behind leaves all of them suspect
                result.failed_paths = e.failed_paths or paths
                logger.warning(
                    "Blob removal failed during project deletion",
                    project_id=str(project.id),
                    failed_count=len(result.failed_paths),
                    error=str(e),
                )

        try:
            result.files_removed = await self.file_repo.delete_for_project(project.id)
            result.comments_removed = await self.comment_repo.delete_for_project(project.id)
            deleted = await self.project_repo.delete_by_id(project.id)
            if deleted == 0:
                await self.session.rollback()
                raise NotFound("Project not found")
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            notify(self.sink, "Could not delete project", NotificationKind.ERROR)
            raise PersistenceError(str(e)) from e

        logger.info(
            "Project deleted",
            project_id=str(project.id),
            files_removed=result.files_removed,
            comments_removed=result.comments_removed,
            partial=result.partial_failure is not None,
        )
        if result.partial_failure is not None:
            notify(
                self.sink,
                "Project deleted, but some files could not be removed",
                NotificationKind.ERROR,
            )
        else:
            notify(self.sink, "Project deleted", NotificationKind.SUCCESS)
        return result

    async def _apply(self, project: Project, values: dict[str, Any], failure_message: str) -> None:
        values = {**values, "updated_at": utc_now()}
        try:
            updated = await self.project_repo.update_fields(project.id, values)
            if updated == 0:
                await self.session.rollback()
                raise NotFound("Project not found")
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            notify(self.sink, f"{failure_message}: {e}", NotificationKind.ERROR)
            raise PersistenceError(str(e)) from e

        for key, value in values.items():
            setattr(project, key, value)
