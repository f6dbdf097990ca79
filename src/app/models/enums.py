"""Shared enums for models."""

from enum import Enum


class UserRole(str, Enum):
    """What a principal is allowed to do in the system."""

    CLIENT = "client"
    DESIGNER = "designer"
    PROJECT_MANAGER = "project_manager"


class ProjectStatus(str, Enum):
    """Project lifecycle status.

    `pending` is initial. Assignment advances pending to in_progress;
    unassignment always returns to pending.
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
