"""Unlock-notification schedulers."""
from __future__ import annotations

from jianjian.notify.scheduler import (
    FileScheduler,
    InMemoryScheduler,
    NotificationScheduler,
    NullScheduler,
    PendingNotification,
    notification_id,
)

__all__ = [
    "NotificationScheduler",
    "NullScheduler",
    "InMemoryScheduler",
    "FileScheduler",
    "PendingNotification",
    "notification_id",
]
