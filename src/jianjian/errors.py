"""Exception types for jianjian.

Validation failures in the lifecycle (empty drafts, letters that are not
ready yet, unknown ids) are reported as ``None``/``False`` results, not
exceptions.  The types below cover the cases that must reach the caller:
storage failures, unsafe identifiers and malformed configuration.

Each error subclasses the closest builtin so that callers that only know
about ``OSError``/``ValueError``/``KeyError`` still catch it.
"""
from __future__ import annotations


class JianjianError(Exception):
    """Base class for all jianjian errors."""


class LetterStoreError(JianjianError, OSError):
    """Raised when a letter record could not be written durably.

    The previously stored version of the record (if any) is left intact.
    """

    def __init__(self, letter_id: str, reason: str) -> None:
        self.letter_id = letter_id
        self.reason = reason
        super().__init__(f"Could not save letter {letter_id!r}: {reason}")


class InvalidLetterIdError(JianjianError, ValueError):
    """Raised when a letter id cannot be used as a record name."""

    def __init__(self, letter_id: str) -> None:
        self.letter_id = letter_id
        super().__init__(
            f"Letter id {letter_id!r} is not a valid record name. "
            "Ids may only contain letters, digits, '-' and '_'."
        )


class LetterAlreadyOpenedError(JianjianError, ValueError):
    """Raised when trying to set ``opened_at`` on a letter that already has one."""

    def __init__(self, letter_id: str) -> None:
        self.letter_id = letter_id
        super().__init__(f"Letter {letter_id!r} has already been opened.")


class LetterNotFoundError(JianjianError, KeyError):
    """Raised when a letter id is not present in the store."""

    def __init__(self, letter_id: str) -> None:
        self.letter_id = letter_id
        super().__init__(f"Letter {letter_id!r} was not found.")


class ConfigError(JianjianError, ValueError):
    """Raised when a configuration file cannot be interpreted."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid configuration in {source}: {reason}")


class LetterDecodeError(JianjianError, ValueError):
    """Raised when a stored record does not describe a valid letter."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Malformed letter record: {reason}")


class ComposeSessionClosedError(JianjianError, RuntimeError):
    """Raised when a compose session is used after submit or cancel."""

    def __init__(self) -> None:
        super().__init__("This compose session has already been submitted or cancelled.")
