"""Crash-safe file replacement.

``atomic_write_text`` writes to a sibling temporary file, flushes it to
disk, then renames it over the destination.  A reader of the destination
sees either the complete previous contents or the complete new contents,
never a partial write.
"""
from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


def temp_path_for(target: Path) -> Path:
    """Return the temporary path used while writing ``target``."""
    return target.with_name(target.name + TEMP_SUFFIX)


def atomic_write_text(target: Path, text: str) -> None:
    """Atomically replace ``target`` with ``text`` (UTF-8).

    Raises
    ------
    OSError
        If any step fails.  ``target`` is left as it was and the temporary
        file is removed if possible.
    """
    tmp = temp_path_for(target)
    try:
        with tmp.open("w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp, target)
    except OSError:
        with contextlib.suppress(OSError):
            tmp.unlink(missing_ok=True)
        logger.debug("Atomic write of %s failed; temporary file removed", target)
        raise
