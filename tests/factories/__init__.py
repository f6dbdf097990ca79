"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import ProjectFactory, ProfileFactory, ...
"""

from tests.factories.base import BaseFactory, generate_uuid, utc_now
from tests.factories.project import ProjectCommentFactory, ProjectFactory, ProjectFileFactory
from tests.factories.user import DEFAULT_TEST_PASSWORD, ProfileFactory, UserFactory

__all__ = [
    # Base
    "BaseFactory",
    "generate_uuid",
    "utc_now",
    # User
    "DEFAULT_TEST_PASSWORD",
    "ProfileFactory",
    "UserFactory",
    # Project
    "ProjectCommentFactory",
    "ProjectFactory",
    "ProjectFileFactory",
]
