"""Notification utilities.

Re-exports the notification sink contract and default implementation.
"""

from src.app.core.notifications.sink import (
    LogNotificationSink,
    NotificationKind,
    NotificationSink,
    get_notification_sink,
    notify,
)

__all__ = [
    "LogNotificationSink",
    "NotificationKind",
    "NotificationSink",
    "get_notification_sink",
    "notify",
]
