"""Project reads and participant writes: create, list, dashboard, files, comments."""

import re
import time
from dataclasses import dataclass
from pathlib import PurePath
from typing import assert_never
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.config import Settings
from src.app.core.exceptions import NotFound, PersistenceError, ValidationError
from src.app.core.logging import get_logger
from src.app.core.notifications import NotificationKind, NotificationSink, notify
from src.app.core.storage import BlobStore, BlobStoreError
from src.app.models import Project, ProjectComment, ProjectFile
from src.app.models.enums import ProjectStatus, UserRole
from src.app.repositories import (
    ProfileRepository,
    ProjectCommentRepository,
    ProjectFileRepository,
    ProjectRepository,
)
from src.app.schemas.project import (
    MAX_TEXT_LENGTH,
    CommentRead,
    DashboardRead,
    DownloadLink,
    ProjectCreate,
    ProjectListItem,
)
from src.app.services.access_policy import Action, Principal, authorize

logger = get_logger(__name__)

RECENT_PROJECTS_LIMIT = 5

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class FileUpload:
    """An uploaded file as read from the request."""

    name: str
    content_type: str
    data: bytes


def storage_path_for(project_id: UUID, file_name: str, now_ms: int | None = None) -> str:
    """`<project_id>/<epoch_ms>_<name>` with whitespace in the name replaced by `_`."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    base_name = _WHITESPACE.sub("_", PurePath(file_name).name)
    return f"{project_id}/{now_ms}_{base_name}"


def participant_scope(principal: Principal) -> dict[str, UUID | None]:
    """Repository filters limiting queries to what the principal may see."""
    match principal.role:
        case UserRole.CLIENT:
            return {"client_id": principal.id, "designer_id": None}
        case UserRole.DESIGNER:
            return {"client_id": None, "designer_id": principal.id}
        case UserRole.PROJECT_MANAGER:
            return {"client_id": None, "designer_id": None}
        case _:
            assert_never(principal.role)


class ProjectService:
    def __init__(
        self,
        project_repo: ProjectRepository,
        file_repo: ProjectFileRepository,
        comment_repo: ProjectCommentRepository,
        profile_repo: ProfileRepository,
        session: AsyncSession,
        blob_store: BlobStore,
        sink: NotificationSink,
        settings: Settings,
    ):
        self.project_repo = project_repo
        self.file_repo = file_repo
        self.comment_repo = comment_repo
        self.profile_repo = profile_repo
        self.session = session
        self.blob_store = blob_store
        self.sink = sink
        self.settings = settings

    async def get_project(self, principal: Principal, project_id: UUID) -> Project:
        """Load a project the principal may view.

        Raises:
            NotFound: no such project
            PermissionDenied: the project exists but is not visible to the caller
        """
        project = await self.project_repo.get_by_id(project_id)
        if project is None:
            raise NotFound("Project not found")
        authorize(principal, Action.VIEW_PROJECT, project)
        return project

    async def create_project(
        self,
        principal: Principal,
        data: ProjectCreate,
        files: list[FileUpload] | None = None,
    ) -> Project:
        """Create a pending, unassigned project owned by the calling client.

        Attached files are validated before anything is written and uploaded
        after the project row is committed.
        """
        authorize(principal, Action.CREATE_PROJECT)
        uploads = files or []
        for upload in uploads:
            self._validate_upload(upload)

        project = Project(
            title=data.title,
            description=data.description,
            client_id=principal.id,
            designer_id=None,
            status=ProjectStatus.PENDING.value,
        )
        self.project_repo.add(project)
        await self._commit()
        logger.info("Project created", project_id=str(project.id))

        for upload in uploads:
            await self._store_file(principal, project, upload)

        notify(self.sink, "Project created", NotificationKind.SUCCESS)
        return project

    async def list_projects(
        self,
        principal: Principal,
        status: ProjectStatus | None = None,
        search: str | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[ProjectListItem], str | None, bool]:
        """Visible projects, newest first, with client and designer names."""
        projects, next_cursor, has_more = await self.project_repo.list_scoped(
            **participant_scope(principal),
            status=status,
            search=search,
            cursor=cursor,
            limit=limit,
        )
        return await self._with_names(projects), next_cursor, has_more

    async def dashboard(self, principal: Principal) -> DashboardRead:
        """The most recent visible projects and per-status counts."""
        scope = participant_scope(principal)
        recent = await self.project_repo.recent(**scope, limit=RECENT_PROJECTS_LIMIT)
        counts = await self.project_repo.status_counts(**scope)
        return DashboardRead(
            recent_projects=await self._with_names(recent),
            status_counts=counts,
            total=sum(counts.values()),
        )

    async def upload_files(
        self, principal: Principal, project: Project, uploads: list[FileUpload]
    ) -> list[ProjectFile]:
        """Store blobs and record them against the project.

        Every file is validated before the first one is written, so a bad
        file in the batch leaves nothing behind.

        Raises:
            PermissionDenied: caller is not the project's client or designer
            ValidationError: no files, empty name, empty file or over the size limit
            PersistenceError: the blob store or the database failed
        """
        authorize(principal, Action.UPLOAD_FILE, project)
        if not uploads:
            raise ValidationError("No files to upload")
        for upload in uploads:
            self._validate_upload(upload)

        return [await self._store_file(principal, project, upload) for upload in uploads]

    async def upload_file(
        self, principal: Principal, project: Project, upload: FileUpload
    ) -> ProjectFile:
        (record,) = await self.upload_files(principal, project, [upload])
        return record

    def check_upload_size(self, name: str, size: int | None) -> None:
        """Reject a file whose declared size is over the limit, before it is read."""
        if size is not None and size > self.settings.max_upload_bytes:
            raise ValidationError(
                f"{name or 'File'} exceeds the maximum size of "
                f"{self.settings.max_upload_bytes} bytes"
            )

    def _validate_upload(self, upload: FileUpload) -> None:
        if not upload.name.strip():
            raise ValidationError("File name is required")
        if not upload.data:
            raise ValidationError(f"{upload.name} is empty")
        self.check_upload_size(upload.name, len(upload.data))

    async def _store_file(
        self, principal: Principal, project: Project, upload: FileUpload
    ) -> ProjectFile:
        path = storage_path_for(project.id, upload.name)
        try:
            await self.blob_store.put(path, upload.data, upload.content_type)
        except BlobStoreError as e:
            notify(self.sink, f"Could not upload {upload.name}", NotificationKind.ERROR)
            raise PersistenceError(str(e)) from e

        record = ProjectFile(
            project_id=project.id,
            file_name=upload.name,
            file_type=upload.content_type,
            file_size=len(upload.data),
            storage_path=path,
            uploaded_by=principal.id,
        )
        self.file_repo.add(record)
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            await self._discard_blob(path)
            raise PersistenceError(str(e)) from e

        logger.info(
            "File uploaded",
            project_id=str(project.id),
            file_id=str(record.id),
            size=record.file_size,
        )
        return record

    async def list_files(self, principal: Principal, project: Project) -> list[ProjectFile]:
        authorize(principal, Action.VIEW_PROJECT, project)
        return await self.file_repo.list_for_project(project.id)

    async def file_download_url(
        self, principal: Principal, project: Project, file_id: UUID
    ) -> DownloadLink:
        """A short-lived link to one of the project's files."""
        authorize(principal, Action.VIEW_PROJECT, project)

        record = await self.file_repo.get_for_project(project.id, file_id)
        if record is None:
            raise NotFound("File not found")

        ttl = self.settings.signed_url_ttl_seconds
        try:
            url = await self.blob_store.signed_url(record.storage_path, ttl)
        except BlobStoreError as e:
            notify(self.sink, "Could not generate download link", NotificationKind.ERROR)
            raise PersistenceError(str(e)) from e
        return DownloadLink(url=url, expires_in=ttl)

    async def add_comment(
        self, principal: Principal, project: Project, content: str
    ) -> CommentRead:
        """Append a comment; returned with the author's name."""
        authorize(principal, Action.ADD_COMMENT, project)

        content = content.strip()
        if not content:
            raise ValidationError("Comment cannot be empty")
        if len(content) > MAX_TEXT_LENGTH:
            raise ValidationError(f"Comment cannot exceed {MAX_TEXT_LENGTH} characters")

        comment = ProjectComment(project_id=project.id, user_id=principal.id, content=content)
        self.comment_repo.add(comment)
        await self._commit()

        notify(self.sink, "Comment added", NotificationKind.SUCCESS)
        return CommentRead(
            id=comment.id,
            project_id=comment.project_id,
            user_id=comment.user_id,
            content=comment.content,
            created_at=comment.created_at,
            author_name=principal.full_name or None,
        )

    async def list_comments(self, principal: Principal, project: Project) -> list[CommentRead]:
        """Comments oldest first."""
        authorize(principal, Action.VIEW_PROJECT, project)

        rows = await self.comment_repo.list_with_authors(project.id)
        return [
            CommentRead(
                id=comment.id,
                project_id=comment.project_id,
                user_id=comment.user_id,
                content=comment.content,
                created_at=comment.created_at,
                author_name=name,
                author_avatar_url=avatar,
            )
            for comment, name, avatar in rows
        ]

    async def _with_names(self, projects: list[Project]) -> list[ProjectListItem]:
        ids = {p.client_id for p in projects} | {p.designer_id for p in projects if p.designer_id}
        names = await self.profile_repo.names_by_id(list(ids))
        return [
            ProjectListItem.model_validate(project).model_copy(
                update={
                    "client_name": names.get(project.client_id),
                    "designer_name": names.get(project.designer_id)
                    if project.designer_id
                    else None,
                }
            )
            for project in projects
        ]

    async def _discard_blob(self, path: str) -> None:
        try:
            await self.blob_store.remove([path])
        except BlobStoreError as e:
            logger.warning("Orphaned blob after failed insert", path=path, error=str(e))

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(str(e)) from e
