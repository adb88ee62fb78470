"""The ``Letter`` entity and its derived delivery status.

A letter is immutable once written.  The only field that ever changes is
``opened_at``, which goes from ``None`` to an instant exactly once; that
transition produces a new ``Letter`` value via ``with_opened``.

Status is never stored.  It is recomputed from the letter's timestamps, the
current instant and the home flag every time it is asked for, so moving the
clock or toggling the home flag reclassifies every letter immediately.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from jianjian.errors import LetterAlreadyOpenedError

DEFAULT_STYLE_ID = "paper-01"


class Status(Enum):
    """Delivery state of a letter at a given instant."""

    IN_TRANSIT = "inTransit"
    READY = "ready"
    OPENED = "opened"


def new_letter_id() -> str:
    """Return a fresh opaque letter id."""
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class Letter:
    """A single letter.

    Parameters
    ----------
    id:
        Opaque unique identifier.
    authored_by_local_user:
        ``True`` for letters written on this device.
    content:
        The letter body.
    created_at:
        When the letter was written.
    unlock_at:
        When the letter arrives.  Never earlier than ``created_at``.
    requires_home_gate:
        When ``True`` the letter can only be opened while the home flag is on.
    ink_used:
        Characters charged against the author's weekly ink.
    opened_at:
        When the letter was opened, or ``None``.
    style_id:
        Stationery identifier; carried through storage untouched.
    """

    id: str
    authored_by_local_user: bool
    content: str
    created_at: datetime
    unlock_at: datetime
    requires_home_gate: bool
    ink_used: int
    opened_at: datetime | None = None
    style_id: str | None = field(default=DEFAULT_STYLE_ID)

    def __post_init__(self) -> None:
        if self.unlock_at < self.created_at:
            raise ValueError(
                f"Letter {self.id!r}: unlock_at ({self.unlock_at.isoformat()}) "
                f"is before created_at ({self.created_at.isoformat()})"
            )
        if self.ink_used < 0:
            raise ValueError(f"Letter {self.id!r}: ink_used must be >= 0, got {self.ink_used}")

    @classmethod
    def new(
        cls,
        *,
        content: str,
        created_at: datetime,
        unlock_at: datetime,
        authored_by_local_user: bool = True,
        requires_home_gate: bool = True,
        ink_used: int | None = None,
        style_id: str | None = DEFAULT_STYLE_ID,
    ) -> "Letter":
        """Create an unopened letter with a fresh id.

        ``ink_used`` defaults to the length of ``content``.
        """
        return cls(
            id=new_letter_id(),
            authored_by_local_user=authored_by_local_user,
            content=content,
            created_at=created_at,
            unlock_at=unlock_at,
            requires_home_gate=requires_home_gate,
            ink_used=len(content) if ink_used is None else ink_used,
            opened_at=None,
            style_id=style_id,
        )

    @property
    def is_opened(self) -> bool:
        return self.opened_at is not None

    def with_opened(self, at: datetime) -> "Letter":
        """Return a copy of this letter opened at ``at``.

        Raises
        ------
        LetterAlreadyOpenedError
            If ``opened_at`` is already set.
        """
        if self.opened_at is not None:
            raise LetterAlreadyOpenedError(self.id)
        return replace(self, opened_at=at)

    def preview(self, limit: int = 12) -> str:
        """Return the first ``limit`` characters, with an ellipsis if cut."""
        if len(self.content) > limit:
            return self.content[:limit] + "…"
        return self.content


def raw_status(letter: Letter, now: datetime) -> Status:
    """Return the status from time and open-state alone, ignoring the home gate."""
    if letter.opened_at is not None:
        return Status.OPENED
    if now >= letter.unlock_at:
        return Status.READY
    return Status.IN_TRANSIT


def status(letter: Letter, now: datetime, home_flag: bool) -> Status:
    """Return the letter's status at ``now``.

    A home-gated letter whose time has come still reports ``IN_TRANSIT``
    while the home flag is off.  Opened letters are ``OPENED`` at any
    ``now``, including instants before their original ``unlock_at``.
    """
    current = raw_status(letter, now)
    if current is Status.READY and letter.requires_home_gate and not home_flag:
        return Status.IN_TRANSIT
    return current


def can_open(letter: Letter, now: datetime, home_flag: bool) -> bool:
    """Return ``True`` if the letter may be opened right now."""
    return status(letter, now, home_flag) is Status.READY
