"""Project endpoints: CRUD, assignment, status, files and comments.

Permission checks live in the services; routers only translate HTTP.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, File, Form, Query, UploadFile, status
from pydantic import ValidationError as PydanticValidationError

from src.app.api.dependencies import (
    CurrentPrincipal,
    LifecycleServiceDep,
    ProjectServiceDep,
    VisibleProject,
)
from src.app.core.exceptions import ValidationError
from src.app.models.enums import ProjectStatus
from src.app.schemas.pagination import PaginatedResponse
from src.app.schemas.project import (
    MAX_TEXT_LENGTH,
    MAX_TITLE_LENGTH,
    AssignDesignerRequest,
    CommentCreate,
    CommentRead,
    DeleteProjectResult,
    DownloadLink,
    FileRead,
    ProjectCreate,
    ProjectListItem,
    ProjectRead,
    ProjectUpdate,
    StatusChangeRequest,
)
from src.app.services import FileUpload, ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])


async def _read_uploads(files: list[UploadFile], service: ProjectService) -> list[FileUpload]:
    """Read request files once every declared size is known to be within the limit."""
    for file in files:
        service.check_upload_size(file.filename or "", file.size)
    return [
        FileUpload(
            name=file.filename or "",
            content_type=file.content_type or "application/octet-stream",
            data=await file.read(),
        )
        for file in files
    ]


@router.get(
    "",
    response_model=PaginatedResponse[ProjectListItem],
    summary="List projects",
    description=(
        "Clients see their own projects, designers the projects assigned to them, "
        "project managers every project. Newest first, cursor-paginated."
    ),
)
async def list_projects(
    principal: CurrentPrincipal,
    service: ProjectServiceDep,
    status_filter: Annotated[
        ProjectStatus | None, Query(alias="status", description="Only this status")
    ] = None,
    search: Annotated[str | None, Query(max_length=200, description="Match title")] = None,
    cursor: Annotated[str | None, Query(description="Cursor for pagination")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Max items to return")] = 50,
) -> PaginatedResponse[ProjectListItem]:
    items, next_cursor, has_more = await service.list_projects(
        principal, status=status_filter, search=search, cursor=cursor, limit=limit
    )
    return PaginatedResponse(items=items, next_cursor=next_cursor, has_more=has_more)


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
    description=(
        "Multipart form with `title`, optional `description` and optional `files`. "
        "Attachments are checked before anything is stored."
    ),
    responses={
        201: {"description": "Project created as pending and unassigned"},
        403: {"description": "Only clients can create projects"},
        422: {"description": "Blank title, or an empty or oversized attachment"},
    },
)
async def create_project(
    title: Annotated[str, Form(max_length=MAX_TITLE_LENGTH)],
    principal: CurrentPrincipal,
    service: ProjectServiceDep,
    description: Annotated[str | None, Form(max_length=MAX_TEXT_LENGTH)] = None,
    files: Annotated[list[UploadFile] | None, File(description="Attachments")] = None,
) -> ProjectRead:
    try:
        data = ProjectCreate(title=title, description=description)
    except PydanticValidationError as e:
        raise ValidationError(e.errors()[0]["msg"]) from e

    uploads = await _read_uploads(files or [], service)
    project = await service.create_project(principal, data, files=uploads)
    return ProjectRead.model_validate(project)


@router.get(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Get project",
    responses={
        403: {"description": "Project not visible to the caller"},
        404: {"description": "Project not found"},
    },
)
async def get_project(project: VisibleProject) -> ProjectRead:
    return ProjectRead.model_validate(project)


@router.patch(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Edit project",
    responses={403: {"description": "Only project managers can edit projects"}},
)
async def edit_project(
    data: ProjectUpdate,
    project: VisibleProject,
    principal: CurrentPrincipal,
    lifecycle: LifecycleServiceDep,
) -> ProjectRead:
    project = await lifecycle.edit_project(principal, project, data)
    return ProjectRead.model_validate(project)


@router.delete(
    "/{project_id}",
    response_model=DeleteProjectResult,
    summary="Delete project",
    description=(
        "Deletes the project with its files and comments. Stored blobs that could "
        "not be removed are listed in `blob_failures`; the project is deleted anyway."
    ),
    responses={403: {"description": "Only project managers can delete projects"}},
)
async def delete_project(
    project: VisibleProject,
    principal: CurrentPrincipal,
    lifecycle: LifecycleServiceDep,
) -> DeleteProjectResult:
    result = await lifecycle.delete_project(principal, project)
    return DeleteProjectResult(
        project_id=result.project_id,
        files_removed=result.files_removed,
        blob_failures=result.failed_paths,
    )


@router.put(
    "/{project_id}/designer",
    response_model=ProjectRead,
    summary="Assign designer",
    description="A pending project moves to in_progress; other statuses are kept.",
    responses={
        403: {"description": "Only project managers can assign designers"},
        404: {"description": "Project or designer not found"},
    },
)
async def assign_designer(
    data: AssignDesignerRequest,
    project: VisibleProject,
    principal: CurrentPrincipal,
    lifecycle: LifecycleServiceDep,
) -> ProjectRead:
    project = await lifecycle.assign_designer(principal, project, data.designer_id)
    return ProjectRead.model_validate(project)


@router.delete(
    "/{project_id}/designer",
    response_model=ProjectRead,
    summary="Unassign designer",
    description="Clears the designer and returns the project to pending.",
    responses={403: {"description": "Only project managers can assign designers"}},
)
async def unassign_designer(
    project: VisibleProject,
    principal: CurrentPrincipal,
    lifecycle: LifecycleServiceDep,
) -> ProjectRead:
    project = await lifecycle.unassign_designer(principal, project)
    return ProjectRead.model_validate(project)


@router.put(
    "/{project_id}/status",
    response_model=ProjectRead,
    summary="Change status",
    responses={403: {"description": "Only project managers can change project status"}},
)
async def change_status(
    data: StatusChangeRequest,
    project: VisibleProject,
    principal: CurrentPrincipal,
    lifecycle: LifecycleServiceDep,
) -> ProjectRead:
    project = await lifecycle.change_status(principal, project, data.status)
    return ProjectRead.model_validate(project)


@router.get("/{project_id}/files", response_model=list[FileRead], summary="List files")
async def list_files(
    project: VisibleProject,
    principal: CurrentPrincipal,
    service: ProjectServiceDep,
) -> list[FileRead]:
    files = await service.list_files(principal, project)
    return [FileRead.model_validate(f) for f in files]


@router.post(
    "/{project_id}/files",
    response_model=list[FileRead],
    status_code=status.HTTP_201_CREATED,
    summary="Upload files",
    responses={
        403: {"description": "Only the project's client or assigned designer can upload"},
        422: {"description": "Empty or oversized file"},
        503: {"description": "Storage failure"},
    },
)
async def upload_files(
    files: list[UploadFile],
    project: VisibleProject,
    principal: CurrentPrincipal,
    service: ProjectServiceDep,
) -> list[FileRead]:
    uploads = await _read_uploads(files, service)
    records = await service.upload_files(principal, project, uploads)
    return [FileRead.model_validate(record) for record in records]


@router.get(
    "/{project_id}/files/{file_id}/download",
    response_model=DownloadLink,
    summary="Get download link",
    responses={404: {"description": "File not found"}},
)
async def file_download_url(
    file_id: UUID,
    project: VisibleProject,
    principal: CurrentPrincipal,
    service: ProjectServiceDep,
) -> DownloadLink:
    """A signed link valid for a short time (60 seconds by default)."""
    return await service.file_download_url(principal, project, file_id)


@router.get("/{project_id}/comments", response_model=list[CommentRead], summary="List comments")
async def list_comments(
    project: VisibleProject,
    principal: CurrentPrincipal,
    service: ProjectServiceDep,
) -> list[CommentRead]:
    return await service.list_comments(principal, project)


@router.post(
    "/{project_id}/comments",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add comment",
)
async def add_comment(
    data: CommentCreate,
    project: VisibleProject,
    principal: CurrentPrincipal,
    service: ProjectServiceDep,
) -> CommentRead:
    return await service.add_comment(principal, project, data.content)
