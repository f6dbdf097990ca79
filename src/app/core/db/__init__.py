"""Database utilities - engine, session, migrations."""

from src.app.core.db.engine import dispose_engine, get_engine
from src.app.core.db.session import get_session
from src.app.core.migrations import run_migrations_sync

__all__ = [
    # Engine
    "dispose_engine",
    "get_engine",
    # Session
    "get_session",
    # Migrations
    "run_migrations_sync",
]
