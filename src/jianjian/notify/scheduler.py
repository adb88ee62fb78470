"""Unlock notifications.

The lifecycle asks a ``NotificationScheduler`` to remind the user when a
letter unlocks, and cancels the reminder once the letter is opened.  Delivery
itself is someone else's job: the host platform, a cron job, a desktop
notifier.  Calls are fire-and-forget; a scheduler that raises is logged by
the caller and otherwise ignored.

At most one notification is pending per letter; scheduling again for the
same letter replaces the earlier one.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from jianjian.store.atomic import atomic_write_text

logger = logging.getLogger(__name__)

_ID_PREFIX = "unlock_"


def notification_id(letter_id: str) -> str:
    """Return the notification identifier used for ``letter_id``."""
    return f"{_ID_PREFIX}{letter_id}"


@dataclass(frozen=True)
class PendingNotification:
    """A scheduled reminder."""

    letter_id: str
    title: str
    body: str
    fire_at: datetime

    @property
    def notification_id(self) -> str:
        return notification_id(self.letter_id)

    def to_dict(self) -> dict[str, str]:
        return {
            "letterId": self.letter_id,
            "title": self.title,
            "body": self.body,
            "fireAt": self.fire_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> "PendingNotification":
        return cls(
            letter_id=data["letterId"],
            title=data["title"],
            body=data["body"],
            fire_at=datetime.fromisoformat(data["fireAt"]),
        )


@runtime_checkable
class NotificationScheduler(Protocol):
    """Schedules and cancels per-letter unlock reminders."""

    def schedule(self, letter_id: str, title: str, body: str, fire_at: datetime) -> None: ...

    def cancel(self, letter_id: str) -> None: ...


class NullScheduler:
    """Scheduler for hosts without notification support.  Does nothing."""

    def schedule(self, letter_id: str, title: str, body: str, fire_at: datetime) -> None:
        logger.debug("Notifications unavailable; not scheduling %s", notification_id(letter_id))

    def cancel(self, letter_id: str) -> None:
        pass


class InMemoryScheduler:
    """Keeps pending notifications in a dict."""

    def __init__(self) -> None:
        self._pending: dict[str, PendingNotification] = {}

    def schedule(self, letter_id: str, title: str, body: str, fire_at: datetime) -> None:
        self._pending[letter_id] = PendingNotification(letter_id, title, body, fire_at)

    def cancel(self, letter_id: str) -> None:
        self._pending.pop(letter_id, None)

    def pending(self) -> list[PendingNotification]:
        """Return pending notifications ordered by fire time."""
        return sorted(self._pending.values(), key=lambda n: n.fire_at)

    def due(self, now: datetime) -> list[PendingNotification]:
        """Return pending notifications whose fire time has passed."""
        return [n for n in self.pending() if n.fire_at <= now]

    def __contains__(self, letter_id: object) -> bool:
        return letter_id in self._pending

    def __len__(self) -> int:
        return len(self._pending)


class FileScheduler(InMemoryScheduler):
    """Pending notifications persisted in a JSON file.

    Lets a command-line session see reminders scheduled by an earlier one.
    An unreadable file is treated as empty.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            entries = json.loads(self.path.read_text(encoding="utf-8"))
            for entry in entries:
                notice = PendingNotification.from_dict(entry)
                self._pending[notice.letter_id] = notice
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable notification file %s: %s", self.path, exc)
            self._pending.clear()

    def _commit(self, pending: dict[str, PendingNotification]) -> None:
        """Write ``pending`` to disk, then adopt it.

        If the write fails the in-memory view is left as it was, so it keeps
        matching the file.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        ordered = sorted(pending.values(), key=lambda n: n.fire_at)
        payload = [n.to_dict() for n in ordered]
        atomic_write_text(self.path, json.dumps(payload, indent=2, ensure_ascii=False))
        self._pending = pending

    def schedule(self, letter_id: str, title: str, body: str, fire_at: datetime) -> None:
        updated = dict(self._pending)
        updated[letter_id] = PendingNotification(letter_id, title, body, fire_at)
        self._commit(updated)

    def cancel(self, letter_id: str) -> None:
        if letter_id not in self._pending:
            return
        updated = {key: notice for key, notice in self._pending.items() if key != letter_id}
        self._commit(updated)
