"""Durable storage: letter records and the home flag."""
from __future__ import annotations

from jianjian.store.atomic import atomic_write_text
from jianjian.store.home_flag import FileHomeFlag, HomeFlagStore, InMemoryHomeFlag
from jianjian.store.letter_store import LetterStore

__all__ = [
    "LetterStore",
    "HomeFlagStore",
    "InMemoryHomeFlag",
    "FileHomeFlag",
    "atomic_write_text",
]
