"""Storage for the "at home" flag.

Home-gated letters can only be opened while this flag is on.  The flag is
durable across restarts and defaults to ``True`` the first time it is read.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from jianjian.store.atomic import atomic_write_text

logger = logging.getLogger(__name__)

DEFAULT_HOME_FLAG = True
_KEY = "homeFlag"


@runtime_checkable
class HomeFlagStore(Protocol):
    """Read/write access to the home flag."""

    def get(self) -> bool: ...

    def set(self, value: bool) -> None: ...


class InMemoryHomeFlag:
    """Process-local home flag, for tests and embedding."""

    def __init__(self, value: bool = DEFAULT_HOME_FLAG) -> None:
        self._value = value

    def get(self) -> bool:
        return self._value

    def set(self, value: bool) -> None:
        self._value = bool(value)

    def __repr__(self) -> str:
        return f"InMemoryHomeFlag({self._value!r})"


class FileHomeFlag:
    """Home flag persisted as a small JSON document.

    Parameters
    ----------
    path:
        File holding ``{"homeFlag": true}``.  Created with the default value
        on first read.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def get(self) -> bool:
        if not self.path.exists():
            try:
                self.set(DEFAULT_HOME_FLAG)
            except OSError as exc:
                logger.warning("Could not store default home flag in %s: %s", self.path, exc)
            return DEFAULT_HOME_FLAG
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            value = data[_KEY]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Home flag file %s is unreadable (%s); using default", self.path, exc)
            return DEFAULT_HOME_FLAG
        if not isinstance(value, bool):
            logger.warning("Home flag in %s is not a boolean; using default", self.path)
            return DEFAULT_HOME_FLAG
        return value

    def set(self, value: bool) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_text(self.path, json.dumps({_KEY: bool(value)}))
        logger.debug("Home flag set to %s", bool(value))

    def __repr__(self) -> str:
        return f"FileHomeFlag({str(self.path)!r})"
