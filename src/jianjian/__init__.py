"""jianjian: slow letters that arrive on their own schedule.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import jianjian

    service = jianjian.open_service()          # file-backed, ~/.jianjian
    session = service.begin_compose()
    session.update("Dear friend,")             # throttled to typing speed
    letter = session.submit(jianjian.Route.PROVINCE_3D)

    jianjian.status(letter, now, home_flag=True)
    # <Status.IN_TRANSIT: 'inTransit'>

    jianjian.__version__
    '0.1.0'
"""
from __future__ import annotations

from datetime import datetime, tzinfo
from pathlib import Path
from typing import TYPE_CHECKING

from jianjian.delivery.policy import Route
from jianjian.letters.letter import Letter, Status

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from jianjian.service.lifecycle import LifecycleService


def open_service(config_path: str | Path | None = None) -> "LifecycleService":
    """Return a ``LifecycleService`` backed by the configured data folder.

    Parameters
    ----------
    config_path:
        YAML config file.  ``None`` uses ``JIANJIAN_CONFIG`` or
        ``~/.jianjian/config.yaml``; a missing file means defaults.

    Raises
    ------
    jianjian.errors.ConfigError
        If the config file is malformed.
    """
    from jianjian.config import load_config
    from jianjian.service.lifecycle import LifecycleService

    return LifecycleService.from_config(load_config(config_path))


def status(letter: Letter, now: datetime, home_flag: bool) -> Status:
    """Return ``letter``'s status at ``now`` given the home flag."""
    from jianjian.letters.letter import status as _status

    return _status(letter, now, home_flag)


def can_open(letter: Letter, now: datetime, home_flag: bool) -> bool:
    """Return ``True`` if ``letter`` may be opened at ``now``."""
    from jianjian.letters.letter import can_open as _can_open

    return _can_open(letter, now, home_flag)


def unlock_instant(start: datetime, route: Route, tz: tzinfo | None = None) -> datetime:
    """Return when a letter written at ``start`` over ``route`` unlocks."""
    from jianjian.delivery.policy import unlock_instant as _unlock_instant

    return _unlock_instant(start, route, tz)


__all__ = [
    "__version__",
    "Letter",
    "Status",
    "Route",
    "open_service",
    "status",
    "can_open",
    "unlock_instant",
]
