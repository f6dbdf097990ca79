"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.app.api.dependencies.db import DBSession
from src.app.repositories import (
    ProfileRepository,
    ProjectCommentRepository,
    ProjectFileRepository,
    ProjectRepository,
    RefreshTokenRepository,
    UserRepository,
)


def get_user_repository(session: DBSession) -> UserRepository:
    return UserRepository(session)


def get_profile_repository(session: DBSession) -> ProfileRepository:
    return ProfileRepository(session)


def get_token_repository(session: DBSession) -> RefreshTokenRepository:
    return RefreshTokenRepository(session)


def get_project_repository(session: DBSession) -> ProjectRepository:
    return ProjectRepository(session)


def get_project_file_repository(session: DBSession) -> ProjectFileRepository:
    return ProjectFileRepository(session)


def get_project_comment_repository(session: DBSession) -> ProjectCommentRepository:
    return ProjectCommentRepository(session)


UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
ProfileRepo = Annotated[ProfileRepository, Depends(get_profile_repository)]
TokenRepo = Annotated[RefreshTokenRepository, Depends(get_token_repository)]
ProjectRepo = Annotated[ProjectRepository, Depends(get_project_repository)]
ProjectFileRepo = Annotated[ProjectFileRepository, Depends(get_project_file_repository)]
ProjectCommentRepo = Annotated[ProjectCommentRepository, Depends(get_project_comment_repository)]
