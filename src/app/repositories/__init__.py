"""Repository layer - data access abstraction."""

from src.app.repositories.base import BaseRepository
from src.app.repositories.project import (
    ProjectCommentRepository,
    ProjectFileRepository,
    ProjectRepository,
)
from src.app.repositories.token import RefreshTokenRepository
from src.app.repositories.user import ProfileRepository, UserRepository

__all__ = [
    # Base
    "BaseRepository",
    # Identity
    "ProfileRepository",
    "RefreshTokenRepository",
    "UserRepository",
    # Projects
    "ProjectCommentRepository",
    "ProjectFileRepository",
    "ProjectRepository",
]
