"""Role-based access policy.

A pure function of (principal, action, project). Upload is a participant-only
capability and edit/assign is a manager-only capability; the two sets are
disjoint, so a project manager can edit everything yet upload nothing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, assert_never
from uuid import UUID

from src.app.core.exceptions import PermissionDenied
from src.app.models.enums import UserRole


class Action(str, Enum):
    """Everything the policy can be asked about."""

    VIEW_PROJECT = "view_project"
    CREATE_PROJECT = "create_project"
    EDIT_PROJECT = "edit_project"
    DELETE_PROJECT = "delete_project"
    ASSIGN_DESIGNER = "assign_designer"
    CHANGE_STATUS = "change_status"
    UPLOAD_FILE = "upload_file"
    ADD_COMMENT = "add_comment"
    EDIT_USER_ROLE = "edit_user_role"


# Actions that are decided without looking at a project
PROJECTLESS_ACTIONS = frozenset({Action.CREATE_PROJECT, Action.EDIT_USER_ROLE})


@dataclass(frozen=True)
class Principal:
    """The authenticated caller as seen by the policy."""

    id: UUID
    email: str
    role: UserRole
    full_name: str = ""

    @property
    def is_manager(self) -> bool:
        return self.role is UserRole.PROJECT_MANAGER


class ProjectRef(Protocol):
    """The project attributes the policy reads."""

    @property
    def client_id(self) -> UUID: ...

    @property
    def designer_id(self) -> UUID | None: ...


def is_participant(principal: Principal, project: ProjectRef) -> bool:
    """True if the principal is the project's client or its assigned designer."""
    match principal.role:
        case UserRole.CLIENT:
            return project.client_id == principal.id
        case UserRole.DESIGNER:
            return project.designer_id is not None and project.designer_id == principal.id
        case UserRole.PROJECT_MANAGER:
            return False
        case _:
            assert_never(principal.role)


def can_view(principal: Principal, project: ProjectRef) -> bool:
    """Managers see everything; clients and designers see their own projects."""
    return principal.is_manager or is_participant(principal, project)


def is_allowed(principal: Principal, action: Action, project: ProjectRef | None = None) -> bool:
    """Decide whether `principal` may perform `action` on `project`.

    Project-scoped actions are denied when no project is given.
    """
    if project is None and action not in PROJECTLESS_ACTIONS:
        return False

    match action:
        case Action.CREATE_PROJECT:
            return principal.role is UserRole.CLIENT
        case Action.EDIT_USER_ROLE:
            return principal.is_manager
        case Action.VIEW_PROJECT | Action.ADD_COMMENT:
            assert project is not None
            return can_view(principal, project)
        case (
            Action.EDIT_PROJECT
            | Action.DELETE_PROJECT
            | Action.ASSIGN_DESIGNER
            | Action.CHANGE_STATUS
        ):
            return principal.is_manager
        case Action.UPLOAD_FILE:
            assert project is not None
            return is_participant(principal, project)
        case _:
            assert_never(action)


_DENIAL_MESSAGES = {
    Action.VIEW_PROJECT: "You do not have access to this project",
    Action.CREATE_PROJECT: "Only clients can create projects",
    Action.EDIT_PROJECT: "Only project managers can edit projects",
    Action.DELETE_PROJECT: "Only project managers can delete projects",
    Action.ASSIGN_DESIGNER: "Only project managers can assign designers",
    Action.CHANGE_STATUS: "Only project managers can change project status",
    Action.UPLOAD_FILE: "Only the project's client or assigned designer can upload files",
    Action.ADD_COMMENT: "You do not have access to comment on this project",
    Action.EDIT_USER_ROLE: "Only project managers can change user roles",
}


def authorize(principal: Principal, action: Action, project: ProjectRef | None = None) -> None:
    """Raise PermissionDenied unless the policy allows the action."""
    if not is_allowed(principal, action, project):
        raise PermissionDenied(_DENIAL_MESSAGES[action])
