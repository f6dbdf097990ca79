"""Reusable migration runner for both production and tests."""

import asyncio

from alembic import command
from alembic.config import Config


def run_migrations_sync(revision: str = "head") -> None:
    """Run Alembic migrations synchronously up to `revision`."""
    alembic_cfg = Config("alembic.ini")
    command.upgrade(alembic_cfg, revision)


async def run_migrations_async(revision: str = "head") -> None:
    """Run Alembic migrations from async context.

    Alembic drives its own sync engine, so it runs in a worker thread.
    """
    await asyncio.to_thread(run_migrations_sync, revision)
