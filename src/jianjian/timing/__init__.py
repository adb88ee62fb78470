"""Clocks and local-calendar helpers."""
from __future__ import annotations

from jianjian.timing.calendar import (
    add_calendar_days,
    format_remaining,
    start_of_week,
    to_local,
)
from jianjian.timing.clock import Clock, ManualClock, SystemClock

__all__ = [
    "Clock",
    "SystemClock",
    "ManualClock",
    "add_calendar_days",
    "start_of_week",
    "format_remaining",
    "to_local",
]
