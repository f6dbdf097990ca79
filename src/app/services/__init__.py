from src.app.services.auth_service import AuthService
from src.app.services.identity_service import Identity, IdentityService, ResolveOutcome
from src.app.services.lifecycle_service import DeletionResult, ProjectLifecycleService
from src.app.services.project_service import FileUpload, ProjectService
from src.app.services.user_service import UserService

__all__ = [
    "AuthService",
    "DeletionResult",
    "FileUpload",
    "Identity",
    "IdentityService",
    "ProjectLifecycleService",
    "ProjectService",
    "ResolveOutcome",
    "UserService",
]
