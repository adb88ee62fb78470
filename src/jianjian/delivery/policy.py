"""Delivery routes and the unlock-time policy.

A letter's route decides how long it stays in transit.  Each route carries
a fixed number of whole calendar days; the unlock instant is computed once,
when the letter is written, and never recomputed.

Usage
-----
::

    from jianjian.delivery import Route, unlock_instant

    unlock_at = unlock_instant(now, Route.PROVINCE_3D)
"""
from __future__ import annotations

from datetime import datetime, tzinfo
from enum import Enum

from jianjian.timing.calendar import add_calendar_days


class Route(Enum):
    """Named delivery-speed tiers.

    The enum value is the persisted / command-line identifier.
    """

    LOCAL_1D = "local1d"
    PROVINCE_3D = "province3d"
    NATION_7D = "nation7d"

    @property
    def days(self) -> int:
        """Whole calendar days between writing and unlocking."""
        return _ROUTE_DAYS[self]

    @property
    def display_name(self) -> str:
        return _ROUTE_NAMES[self]

    @classmethod
    def parse(cls, value: str) -> "Route":
        """Look a route up by value (``"local1d"``) or member name (``"LOCAL_1D"``)."""
        try:
            return cls(value)
        except ValueError:
            pass
        try:
            return cls[value.upper()]
        except KeyError:
            choices = ", ".join(r.value for r in cls)
            raise ValueError(f"Unknown route {value!r}; expected one of: {choices}") from None


_ROUTE_DAYS: dict[Route, int] = {
    Route.LOCAL_1D: 1,
    Route.PROVINCE_3D: 3,
    Route.NATION_7D: 7,
}

_ROUTE_NAMES: dict[Route, str] = {
    Route.LOCAL_1D: "Same city, 1 day",
    Route.PROVINCE_3D: "Same province, 3 days",
    Route.NATION_7D: "Cross-country, 7 days",
}


def unlock_instant(start: datetime, route: Route, tz: tzinfo | None = None) -> datetime:
    """Return the instant a letter written at ``start`` over ``route`` unlocks.

    Parameters
    ----------
    start:
        The creation instant (timezone-aware).
    route:
        The delivery route.
    tz:
        Zone whose wall clock the days are added on.  ``None`` uses the
        system local zone.

    Returns
    -------
    datetime
        ``start`` plus ``route.days`` calendar days; never earlier than
        ``start``.
    """
    return add_calendar_days(start, route.days, tz)
