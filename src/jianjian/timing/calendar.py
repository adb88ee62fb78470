"""Calendar arithmetic in the user's local zone.

Delivery delays are whole calendar days and the ink quota resets every
Monday at midnight, both measured on the local wall clock.  When an explicit
``tz`` is given, wall-clock arithmetic happens in that zone; otherwise the
operating system's local time rules are used.

Adding days on the wall clock (rather than multiples of 24 hours) keeps a
"1 day" delay landing at the same local time of day across a daylight-saving
transition.
"""
from __future__ import annotations

from datetime import datetime, time, timedelta, tzinfo


def to_local(instant: datetime, tz: tzinfo | None = None) -> datetime:
    """Express ``instant`` in ``tz`` (or the system local zone)."""
    if tz is not None:
        return instant.astimezone(tz)
    return instant.astimezone()


def add_calendar_days(start: datetime, days: int, tz: tzinfo | None = None) -> datetime:
    """Return ``start`` moved forward by ``days`` local calendar days.

    Never returns an instant earlier than ``start``: if the arithmetic
    overflows, or lands before ``start``, ``start`` itself is returned.
    """
    try:
        if tz is not None:
            result = start.astimezone(tz) + timedelta(days=days)
        else:
            wall = start.astimezone().replace(tzinfo=None) + timedelta(days=days)
            result = wall.astimezone()
    except (OverflowError, ValueError, OSError):
        return start
    if result < start:
        return start
    return result


def start_of_week(now: datetime, tz: tzinfo | None = None) -> datetime:
    """Return the most recent Monday 00:00 on the local wall clock."""
    local = to_local(now, tz)
    monday = local.date() - timedelta(days=local.weekday())
    if tz is not None:
        return datetime.combine(monday, time.min, tzinfo=tz)
    return datetime.combine(monday, time.min).astimezone()


def format_remaining(until: datetime, now: datetime) -> str:
    """Render the time left until ``until`` as a short human string.

    ``"2d 3h"`` when at least a day remains, ``"4h 10m"`` when at least an
    hour remains, otherwise minutes (never less than ``"1m"`` while time is
    still left).  Past or present instants render as ``"0m"``.
    """
    if until <= now:
        return "0m"
    total_minutes = int((until - now).total_seconds() // 60)
    days, rest = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(rest, 60)
    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{max(1, minutes)}m"
