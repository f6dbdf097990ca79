from src.app.schemas.auth import (
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    TokenPair,
)
from src.app.schemas.pagination import PaginatedResponse
from src.app.schemas.project import (
    AssignDesignerRequest,
    CommentCreate,
    CommentRead,
    DashboardRead,
    DeleteProjectResult,
    DownloadLink,
    FileRead,
    ProjectCreate,
    ProjectListItem,
    ProjectRead,
    ProjectUpdate,
    StatusChangeRequest,
)
from src.app.schemas.user import MeRead, ProfileRead, ProfileUpdate, RoleUpdate, UserWithStats

__all__ = [
    # Auth
    "LoginRequest",
    "LogoutRequest",
    "RefreshRequest",
    "RegisterRequest",
    "RegisterResponse",
    "TokenPair",
    # Pagination
    "PaginatedResponse",
    # Project
    "AssignDesignerRequest",
    "CommentCreate",
    "CommentRead",
    "DashboardRead",
    "DeleteProjectResult",
    "DownloadLink",
    "FileRead",
    "ProjectCreate",
    "ProjectListItem",
    "ProjectRead",
    "ProjectUpdate",
    "StatusChangeRequest",
    # User
    "MeRead",
    "ProfileRead",
    "ProfileUpdate",
    "RoleUpdate",
    "UserWithStats",
]
