from datetime import UTC, datetime
from typing import Protocol


def utc_now() -> datetime:
    """Return current UTC time as naive datetime (for PostgreSQL TIMESTAMP).

    Database columns use TIMESTAMP WITHOUT TIME ZONE, so we strip tzinfo.
    All times are stored in UTC by convention.
    """
    return datetime.now(UTC).replace(tzinfo=None)


class _Timestamped(Protocol):
    updated_at: datetime


def touch(entity: _Timestamped) -> datetime:
    """Bump `updated_at`; SQLModel has no onupdate hook for it."""
    entity.updated_at = utc_now()
    return entity.updated_at
