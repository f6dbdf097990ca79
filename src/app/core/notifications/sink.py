"""User-facing notification sink.

`notify` is fire-and-forget: a failing sink is logged and never raises into
the operation that produced the message.
"""

from enum import Enum
from typing import Protocol

from src.app.core.logging import get_logger

logger = get_logger(__name__)


class NotificationKind(str, Enum):
    """Severity shown to the user."""

    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class NotificationSink(Protocol):
    def notify(self, message: str, kind: NotificationKind) -> None: ...


class LogNotificationSink:
    """Sink that records notifications in the structured log."""

    def notify(self, message: str, kind: NotificationKind) -> None:
        log = logger.warning if kind == NotificationKind.ERROR else logger.info
        log("Notification", message=message, kind=kind.value)


def notify(sink: NotificationSink, message: str, kind: NotificationKind) -> None:
    """Deliver a notification without letting the sink fail the caller."""
    try:
        sink.notify(message, kind)
    except Exception as e:
        logger.warning("Notification sink failed", error=str(e), kind=kind.value)


_sink: NotificationSink = LogNotificationSink()


def get_notification_sink() -> NotificationSink:
    """Get the process-wide notification sink."""
    return _sink
