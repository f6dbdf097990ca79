"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.app.api.dependencies.db import DBSession
from src.app.api.dependencies.repositories import (
    ProfileRepo,
    ProjectCommentRepo,
    ProjectFileRepo,
    ProjectRepo,
    TokenRepo,
    UserRepo,
)
from src.app.core.config import Settings, get_settings
from src.app.core.notifications import NotificationSink, get_notification_sink
from src.app.core.storage import BlobStore, get_blob_store
from src.app.services import (
    AuthService,
    IdentityService,
    ProjectLifecycleService,
    ProjectService,
    UserService,
)

SettingsDep = Annotated[Settings, Depends(get_settings)]
BlobStoreDep = Annotated[BlobStore, Depends(get_blob_store)]
NotificationSinkDep = Annotated[NotificationSink, Depends(get_notification_sink)]


def get_identity_service(
    user_repo: UserRepo,
    profile_repo: ProfileRepo,
    session: DBSession,
) -> IdentityService:
    return IdentityService(user_repo, profile_repo, session)


def get_auth_service(
    user_repo: UserRepo,
    profile_repo: ProfileRepo,
    token_repo: TokenRepo,
    session: DBSession,
) -> AuthService:
    return AuthService(user_repo, profile_repo, token_repo, session)


def get_user_service(profile_repo: ProfileRepo, session: DBSession) -> UserService:
    return UserService(profile_repo, session)


def get_project_service(
    project_repo: ProjectRepo,
    file_repo: ProjectFileRepo,
    comment_repo: ProjectCommentRepo,
    profile_repo: ProfileRepo,
    session: DBSession,
    blob_store: BlobStoreDep,
    sink: NotificationSinkDep,
    settings: SettingsDep,
) -> ProjectService:
    return ProjectService(
        project_repo,
        file_repo,
        comment_repo,
        profile_repo,
        session,
        blob_store,
        sink,
        settings,
    )


def get_lifecycle_service(
    project_repo: ProjectRepo,
    file_repo: ProjectFileRepo,
    comment_repo: ProjectCommentRepo,
    profile_repo: ProfileRepo,
    session: DBSession,
    blob_store: BlobStoreDep,
    sink: NotificationSinkDep,
) -> ProjectLifecycleService:
    return ProjectLifecycleService(
        project_repo,
        file_repo,
        comment_repo,
        profile_repo,
        session,
        blob_store,
        sink,
    )


IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
LifecycleServiceDep = Annotated[ProjectLifecycleService, Depends(get_lifecycle_service)]
