"""Letter entity, derived status and serialization."""
from __future__ import annotations

from jianjian.letters.letter import (
    DEFAULT_STYLE_ID,
    Letter,
    Status,
    can_open,
    new_letter_id,
    raw_status,
    status,
)
from jianjian.letters.serializer import LetterSerializer

__all__ = [
    "Letter",
    "Status",
    "status",
    "raw_status",
    "can_open",
    "new_letter_id",
    "DEFAULT_STYLE_ID",
    "LetterSerializer",
]
