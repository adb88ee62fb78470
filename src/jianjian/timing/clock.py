"""Clock abstractions.

Every time-dependent decision in jianjian takes the current instant from a
``Clock`` rather than calling ``datetime.now()`` directly, so that tests can
pin or advance time deterministically.

All instants are timezone-aware ``datetime`` objects.
"""
from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Anything that can report the current instant."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in the configured zone, or the system local zone.

    Parameters
    ----------
    tz:
        Zone to express instants in.  ``None`` means the operating system's
        local zone.
    """

    def __init__(self, tz: tzinfo | None = None) -> None:
        self._tz = tz

    def now(self) -> datetime:
        if self._tz is None:
            return datetime.now().astimezone()
        return datetime.now(self._tz)

    def __repr__(self) -> str:
        return f"SystemClock(tz={self._tz!r})"


class ManualClock:
    """A clock that only moves when told to.

    Parameters
    ----------
    start:
        The initial instant.  Must be timezone-aware.
    """

    def __init__(self, start: datetime) -> None:
        if start.tzinfo is None:
            raise ValueError("ManualClock requires a timezone-aware start instant")
        self._now = start

    def now(self) -> datetime:
        return self._now

    def set(self, instant: datetime) -> None:
        """Jump to ``instant`` (forwards or backwards)."""
        if instant.tzinfo is None:
            raise ValueError("ManualClock requires timezone-aware instants")
        self._now = instant

    def advance(self, delta: timedelta | None = None, **kwargs: float) -> datetime:
        """Move the clock forward and return the new instant.

        Accepts either a ``timedelta`` or ``timedelta`` keyword arguments,
        e.g. ``clock.advance(seconds=3)``.
        """
        step = delta if delta is not None else timedelta(**kwargs)
        self._now = self._now + step
        return self._now

    def __repr__(self) -> str:
        return f"ManualClock({self._now.isoformat()})"
