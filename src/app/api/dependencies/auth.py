"""Authentication dependencies: bearer header -> Session -> Identity -> Principal."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header

from src.app.api.dependencies.services import IdentityServiceDep, ProjectServiceDep
from src.app.core.logging import bind_principal_context
from src.app.core.session import Session, session_from_authorization
from src.app.models import Project
from src.app.services import Identity
from src.app.services.access_policy import Principal


def get_current_session(
    authorization: Annotated[str | None, Header()] = None,
) -> Session | None:
    """Session for this request, or None when the caller is anonymous."""
    return session_from_authorization(authorization)


CurrentSession = Annotated[Session | None, Depends(get_current_session)]


async def get_current_identity(
    auth_session: CurrentSession,
    identity_service: IdentityServiceDep,
) -> Identity:
    """Resolve the caller's profile, provisioning it on first use.

    Raises NotAuthenticated (401) when there is no valid session.
    """
    identity = await identity_service.resolve_or_provision(auth_session)
    bind_principal_context(identity.user.id, identity.profile.role)
    return identity


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]


def get_current_principal(identity: CurrentIdentity) -> Principal:
    return identity.principal


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


async def get_visible_project(
    project_id: UUID,
    principal: CurrentPrincipal,
    project_service: ProjectServiceDep,
) -> Project:
    """The path's project, if it exists and the caller may view it."""
    return await project_service.get_project(principal, project_id)


VisibleProject = Annotated[Project, Depends(get_visible_project)]
