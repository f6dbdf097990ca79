"""Model exports.

Import from here: `from src.app.models import Project, Profile`
"""

from src.app.models.auth import RefreshToken
from src.app.models.enums import ProjectStatus, UserRole
from src.app.models.project import Project, ProjectComment, ProjectFile
from src.app.models.user import Profile, User

__all__ = [
    # Enums
    "ProjectStatus",
    "UserRole",
    # Models
    "Profile",
    "Project",
    "ProjectComment",
    "ProjectFile",
    "RefreshToken",
    "User",
]
