"""FastAPI dependency injection definitions.

Re-exports the dependencies routers use.
"""

# Auth
from src.app.api.dependencies.auth import (
    CurrentIdentity,
    CurrentPrincipal,
    CurrentSession,
    VisibleProject,
    get_current_identity,
    get_current_principal,
    get_current_session,
    get_visible_project,
)

# Database
from src.app.api.dependencies.db import DBSession, get_db_session

# Services
from src.app.api.dependencies.services import (
    AuthServiceDep,
    BlobStoreDep,
    IdentityServiceDep,
    LifecycleServiceDep,
    NotificationSinkDep,
    ProjectServiceDep,
    SettingsDep,
    UserServiceDep,
    get_auth_service,
    get_identity_service,
    get_lifecycle_service,
    get_project_service,
    get_user_service,
)

__all__ = [
    # Database
    "DBSession",
    "get_db_session",
    # Auth
    "CurrentIdentity",
    "CurrentPrincipal",
    "CurrentSession",
    "VisibleProject",
    "get_current_identity",
    "get_current_principal",
    "get_current_session",
    "get_visible_project",
    # Services
    "AuthServiceDep",
    "BlobStoreDep",
    "IdentityServiceDep",
    "LifecycleServiceDep",
    "NotificationSinkDep",
    "ProjectServiceDep",
    "SettingsDep",
    "UserServiceDep",
    "get_auth_service",
    "get_identity_service",
    "get_lifecycle_service",
    "get_project_service",
    "get_user_service",
]
