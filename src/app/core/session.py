"""Explicit session objects and session-change notifications.

A `Session` is derived from the bearer token at the start of each request and
passed down explicitly; nothing stores it globally. Login and logout publish
session changes to listeners registered with `on_session_change`.
"""

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from src.app.core.logging import get_logger
from src.app.core.security import TokenType, decode_token

logger = get_logger(__name__)


@dataclass(frozen=True)
class Session:
    """An authenticated session: who, and until when."""

    user_id: UUID
    expires_at: datetime


SessionListener = Callable[[Session | None], Awaitable[None] | None]


def session_from_authorization(authorization: str | None) -> Session | None:
    """Resolve the current session from an `Authorization: Bearer` header.

    Returns None for a missing header, a malformed or expired token, or a
    token that is not an access token.
    """
    if not authorization or not authorization.startswith("Bearer "):
        return None

    payload = decode_token(authorization[7:])
    if payload is None or payload.get("type") != TokenType.ACCESS:
        return None

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        return None

    exp = payload.get("exp")
    if not isinstance(exp, int | float):
        return None

    return Session(user_id=user_id, expires_at=datetime.fromtimestamp(exp, UTC))


class SessionEvents:
    """Registry of callbacks fired on login (new session) and logout (None)."""

    def __init__(self) -> None:
        self._listeners: list[SessionListener] = []

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        """Register a callback. Returns a function that unregisters it."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def publish(self, session: Session | None) -> None:
        """Fire every listener; a failing listener is logged and skipped."""
        for listener in list(self._listeners):
            try:
                result = listener(session)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning("Session listener failed", error=str(e))


session_events = SessionEvents()
