"""Durable letter storage: one JSON file per letter id.

Layout::

    <directory>/
        3f2a9c....json
        81be04....json

Writes go through ``atomic_write_text`` so that a crash mid-save never
leaves a truncated record behind.  Reads isolate corruption per record: one
unreadable file is logged and skipped, the rest still load.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

from jianjian.errors import InvalidLetterIdError, LetterDecodeError, LetterStoreError
from jianjian.letters.letter import Letter
from jianjian.letters.serializer import LetterSerializer
from jianjian.store.atomic import atomic_write_text

logger = logging.getLogger(__name__)

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")
RECORD_SUFFIX = ".json"


class LetterStore:
    """Filesystem-backed mapping from letter id to ``Letter``.

    Parameters
    ----------
    directory:
        Folder holding the records.  Created on first use.
    serializer:
        Codec for the on-disk form.  Defaults to ``LetterSerializer()``.
    """

    def __init__(self, directory: str | Path, serializer: LetterSerializer | None = None) -> None:
        self.directory = Path(directory)
        self._serializer = serializer or LetterSerializer()
        self.directory.mkdir(parents=True, exist_ok=True)

    def __repr__(self) -> str:
        return f"LetterStore({str(self.directory)!r})"

    def path_for(self, letter_id: str) -> Path:
        """Return the record path for ``letter_id``.

        Raises
        ------
        InvalidLetterIdError
            If the id could escape the store directory or is empty.
        """
        if not _SAFE_ID.match(letter_id):
            raise InvalidLetterIdError(letter_id)
        return self.directory / f"{letter_id}{RECORD_SUFFIX}"

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, letter: Letter) -> None:
        """Write ``letter``, replacing any previous version atomically.

        Raises
        ------
        LetterStoreError
            If the record could not be written.  The previous version, if
            any, is still in place.
        """
        target = self.path_for(letter.id)
        text = self._serializer.to_json(letter)
        try:
            atomic_write_text(target, text)
        except OSError as exc:
            raise LetterStoreError(letter.id, str(exc)) from exc
        logger.debug("Saved letter %s", letter.id)

    def mark_opened(self, letter_id: str, at: datetime) -> Letter | None:
        """Record that ``letter_id`` was opened at ``at``.

        Set-once: a letter that already has ``opened_at`` is returned
        unchanged and nothing is written.

        Returns
        -------
        Letter | None
            The stored letter after the call, or ``None`` if the id is
            unknown.
        """
        letter = self.get(letter_id)
        if letter is None:
            logger.debug("mark_opened: letter %s not found", letter_id)
            return None
        if letter.is_opened:
            logger.debug("mark_opened: letter %s already opened; left untouched", letter_id)
            return letter
        opened = letter.with_opened(at)
        self.save(opened)
        return opened

    def delete(self, letter_id: str) -> bool:
        """Remove a record.  Returns ``False`` if it did not exist."""
        path = self.path_for(letter_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.debug("Deleted letter %s", letter_id)
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _read(self, path: Path) -> Letter | None:
        try:
            letter = self._serializer.from_json(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, LetterDecodeError) as exc:
            logger.warning("Skipping unreadable letter record %s: %s", path.name, exc)
            return None
        # the file name is the key; a record claiming another id is malformed
        if letter.id != path.stem:
            logger.warning(
                "Skipping letter record %s: stored id %r does not match the file name",
                path.name,
                letter.id,
            )
            return None
        return letter

    def get(self, letter_id: str) -> Letter | None:
        """Return the letter stored under ``letter_id``, or ``None``."""
        path = self.path_for(letter_id)
        if not path.exists():
            return None
        return self._read(path)

    def load_all(self) -> list[Letter]:
        """Return every readable letter, newest first.

        Malformed or unreadable records are skipped, never fatal.
        """
        letters: list[Letter] = []
        for path in sorted(self.directory.glob(f"*{RECORD_SUFFIX}")):
            letter = self._read(path)
            if letter is not None:
                letters.append(letter)
        letters.sort(key=lambda item: item.created_at, reverse=True)
        return letters

    def __contains__(self, letter_id: object) -> bool:
        if not isinstance(letter_id, str) or not _SAFE_ID.match(letter_id):
            return False
        return self.path_for(letter_id).exists()

    def __len__(self) -> int:
        return len(self.load_all())
