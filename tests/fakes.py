"""In-memory stand-ins for the database session, repositories and blob store.

Writes made through a fake repository are staged on the `FakeSession` and
only become visible on `commit()`; `rollback()` discards them. That mirrors
the transactional behaviour services rely on without a PostgreSQL server.
"""

from collections.abc import Callable
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from src.app.core.notifications import NotificationKind
from src.app.core.storage import BlobStoreError
from src.app.models import Profile, Project, ProjectComment, ProjectFile, RefreshToken, User
from src.app.models.base import utc_now
from src.app.models.enums import ProjectStatus, UserRole


class FakeSession:
    def __init__(self) -> None:
        self._staged: list[Callable[[], None]] = []
        self.commits = 0
        self.rollbacks = 0
        self.fail_on_commit: SQLAlchemyError | None = None

    def stage(self, op: Callable[[], None]) -> None:
        self._staged.append(op)

    async def flush(self) -> None:
        return None

    async def refresh(self, obj: Any) -> None:
        return None

    async def commit(self) -> None:
        if self.fail_on_commit is not None:
            raise self.fail_on_commit
        for op in self._staged:
            op()
        self._staged.clear()
        self.commits += 1

    async def rollback(self) -> None:
        self._staged.clear()
        self.rollbacks += 1


class FakeDatabase:
    """Committed rows, keyed by id."""

    def __init__(self) -> None:
        self.session = FakeSession()
        self.users: dict[UUID, User] = {}
        self.profiles: dict[UUID, Profile] = {}
        self.projects: dict[UUID, Project] = {}
        self.files: dict[UUID, ProjectFile] = {}
        self.comments: dict[UUID, ProjectComment] = {}
        self.tokens: dict[UUID, RefreshToken] = {}

    def seed(self, *entities: Any) -> None:
        """Insert rows as already committed."""
        for entity in entities:
            self._table_for(entity)[entity.id] = entity

    def _table_for(self, entity: Any) -> dict[UUID, Any]:
        tables: dict[type, dict[UUID, Any]] = {
            User: self.users,
            Profile: self.profiles,
            Project: self.projects,
            ProjectFile: self.files,
            ProjectComment: self.comments,
            RefreshToken: self.tokens,
        }
        return tables[type(entity)]


class _FakeRepository:
    def __init__(self, db: FakeDatabase):
        self.db = db
        self.session = db.session

    def add(self, entity: Any) -> None:
        self.session.stage(lambda: self.db.seed(entity))


class FakeUserRepository(_FakeRepository):
    async def get_by_id(self, id: UUID) -> User | None:
        return self.db.users.get(id)

    async def get_by_email(self, email: str) -> User | None:
        return next(
            (u for u in self.db.users.values() if u.email.lower() == email.lower()),
            None,
        )

    async def exists_by_email(self, email: str) -> bool:
        return await self.get_by_email(email) is not None


class FakeProfileRepository(_FakeRepository):
    async def get_by_id(self, id: UUID) -> Profile | None:
        return self.db.profiles.get(id)

    async def list_by_role(self, role: UserRole) -> list[Profile]:
        profiles = [p for p in self.db.profiles.values() if p.role == role.value]
        return sorted(profiles, key=lambda p: p.full_name)

    async def list_with_emails(
        self, role: UserRole | None = None, search: str | None = None
    ) -> list[tuple[Profile, str]]:
        rows = []
        for profile in self.db.profiles.values():
            user = self.db.users.get(profile.id)
            if user is None:
                continue
            if role is not None and profile.role != role.value:
                continue
            if search and search.lower() not in f"{profile.full_name} {user.email}".lower():
                continue
            rows.append((profile, user.email))
        return sorted(rows, key=lambda row: row[0].created_at, reverse=True)

    async def project_counts(self, profile_ids: list[UUID]) -> dict[UUID, int]:
        counts = dict.fromkeys(profile_ids, 0)
        for project in self.db.projects.values():
            for participant in (project.client_id, project.designer_id):
                if participant in counts:
                    counts[participant] += 1
        return counts

    async def assigned_project_count(self, profile_id: UUID) -> int:
        return sum(1 for p in self.db.projects.values() if p.designer_id == profile_id)

    async def update_role(self, profile_id: UUID, role: UserRole) -> int:
        if profile_id not in self.db.profiles:
            return 0

        def _apply() -> None:
            self.db.profiles[profile_id].role = role.value

        self.session.stage(_apply)
        return 1

    async def names_by_id(self, profile_ids: list[UUID]) -> dict[UUID, str]:
        return {
            pid: self.db.profiles[pid].full_name for pid in profile_ids if pid in self.db.profiles
        }


class FakeRefreshTokenRepository(_FakeRepository):
    async def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        return next((t for t in self.db.tokens.values() if t.token_hash == token_hash), None)

    async def get_valid_by_hash(
        self, token_hash: str, for_update: bool = False
    ) -> RefreshToken | None:
        token = await self.get_by_hash(token_hash)
        if token is None or token.revoked or token.expires_at <= utc_now():
            return None
        return token


def _visible(project: Project, client_id: UUID | None, designer_id: UUID | None) -> bool:
    if client_id is not None and project.client_id != client_id:
        return False
    if designer_id is not None and project.designer_id != designer_id:
        return False
    return True


class FakeProjectRepository(_FakeRepository):
    async def get_by_id(self, id: UUID) -> Project | None:
        return self.db.projects.get(id)

    def _scoped(self, client_id: UUID | None, designer_id: UUID | None) -> list[Project]:
        projects = [p for p in self.db.projects.values() if _visible(p, client_id, designer_id)]
        return sorted(projects, key=lambda p: p.created_at, reverse=True)

    async def list_scoped(
        self,
        client_id: UUID | None = None,
        designer_id: UUID | None = None,
        status: ProjectStatus | None = None,
        search: str | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[Project], str | None, bool]:
        projects = self._scoped(client_id, designer_id)
        if status is not None:
            projects = [p for p in projects if p.status == status.value]
        if search:
            projects = [p for p in projects if search.lower() in p.title.lower()]
        return projects[:limit], None, len(projects) > limit

    async def recent(
        self, client_id: UUID | None = None, designer_id: UUID | None = None, limit: int = 5
    ) -> list[Project]:
        return self._scoped(client_id, designer_id)[:limit]

    async def status_counts(
        self, client_id: UUID | None = None, designer_id: UUID | None = None
    ) -> dict[ProjectStatus, int]:
        counts = dict.fromkeys(ProjectStatus, 0)
        for project in self._scoped(client_id, designer_id):
            counts[ProjectStatus(project.status)] += 1
        return counts

    async def update_fields(self, project_id: UUID, values: dict[str, Any]) -> int:
        if project_id not in self.db.projects:
            return 0

        def _apply() -> None:
            stored = self.db.projects[project_id]
            for key, value in values.items():
                setattr(stored, key, value)

        self.session.stage(_apply)
        return 1

    async def delete_by_id(self, project_id: UUID) -> int:
        if project_id not in self.db.projects:
            return 0
        self.session.stage(lambda: self.db.projects.pop(project_id, None))
        return 1


class FakeProjectFileRepository(_FakeRepository):
    async def list_for_project(self, project_id: UUID) -> list[ProjectFile]:
        files = [f for f in self.db.files.values() if f.project_id == project_id]
        return sorted(files, key=lambda f: f.created_at, reverse=True)

    async def get_for_project(self, project_id: UUID, file_id: UUID) -> ProjectFile | None:
        record = self.db.files.get(file_id)
        return record if record is not None and record.project_id == project_id else None

    async def delete_for_project(self, project_id: UUID) -> int:
        ids = [f.id for f in self.db.files.values() if f.project_id == project_id]

        def _apply() -> None:
            for file_id in ids:
                self.db.files.pop(file_id, None)

        self.session.stage(_apply)
        return len(ids)


class FakeProjectCommentRepository(_FakeRepository):
    async def list_with_authors(
        self, project_id: UUID
    ) -> list[tuple[ProjectComment, str | None, str | None]]:
        comments = sorted(
            (c for c in self.db.comments.values() if c.project_id == project_id),
            key=lambda c: c.created_at,
        )
        rows = []
        for comment in comments:
            author = self.db.profiles.get(comment.user_id)
            rows.append(
                (
                    comment,
                    author.full_name if author else None,
                    author.avatar_url if author else None,
                )
            )
        return rows

    async def delete_for_project(self, project_id: UUID) -> int:
        ids = [c.id for c in self.db.comments.values() if c.project_id == project_id]

        def _apply() -> None:
            for comment_id in ids:
                self.db.comments.pop(comment_id, None)

        self.session.stage(_apply)
        return len(ids)


class InMemoryBlobStore:
    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.fail_put = False
        self.fail_remove = False
        # Keys that refuse to be deleted while the rest go through
        self.stuck_paths: set[str] = set()

    async def put(self, path: str, data: bytes, content_type: str | None = None) -> None:
        if self.fail_put:
            raise BlobStoreError(f"Could not store {path}")
        self.blobs[path] = data

    async def remove(self, paths: list[str]) -> None:
        if self.fail_remove:
            raise BlobStoreError("bucket unavailable")
        failed = [path for path in paths if path in self.stuck_paths]
        for path in paths:
            if path not in self.stuck_paths:
                self.blobs.pop(path, None)
        if failed:
            raise BlobStoreError(f"Could not remove {len(failed)} blob(s)", failed)

    async def signed_url(self, path: str, ttl_seconds: int) -> str:
        return f"https://blobs.test/{path}?ttl={ttl_seconds}"


class RecordingSink:
    def __init__(self) -> None:
        self.messages: list[tuple[str, NotificationKind]] = []

    def notify(self, message: str, kind: NotificationKind) -> None:
        self.messages.append((message, kind))

    @property
    def kinds(self) -> list[NotificationKind]:
        return [kind for _, kind in self.messages]
