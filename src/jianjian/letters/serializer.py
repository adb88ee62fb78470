"""Letter serialization to and from JSON and YAML.

The persisted form is a flat JSON object with camelCase keys::

    {
      "id": "3f2a...",
      "fromMe": true,
      "content": "...",
      "createdAt": "2024-03-04T09:30:00+08:00",
      "unlockAt": "2024-03-05T09:30:00+08:00",
      "requiresHome": true,
      "styleId": "paper-01",
      "inkUsed": 42,
      "openedAt": null
    }

Timestamps are ISO-8601 with an explicit offset.  A trailing ``Z`` is
accepted on input, and naive timestamps are read as UTC.

Usage
-----
::

    from jianjian.letters.serializer import LetterSerializer

    serializer = LetterSerializer()
    text = serializer.to_json(letter)
    assert serializer.from_json(text) == letter
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

import yaml

from jianjian.errors import LetterDecodeError
from jianjian.letters.letter import Letter

_REQUIRED_KEYS = ("id", "fromMe", "content", "createdAt", "unlockAt", "requiresHome", "inkUsed")


def _timestamp_to_str(value: datetime) -> str:
    return value.isoformat()


def _timestamp_from_str(value: Any, key: str) -> datetime:
    if not isinstance(value, str):
        raise LetterDecodeError(f"{key} must be an ISO-8601 string, got {type(value).__name__}")
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise LetterDecodeError(f"{key} is not a valid timestamp: {value!r}") from None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def _expect(value: Any, kind: type, key: str) -> Any:
    # bool is an int subclass; keep them apart
    if kind is int and isinstance(value, bool):
        raise LetterDecodeError(f"{key} must be an integer, got bool")
    if not isinstance(value, kind):
        raise LetterDecodeError(f"{key} must be {kind.__name__}, got {type(value).__name__}")
    return value


class LetterSerializer:
    """Converts between ``Letter`` objects and plain dicts / JSON / YAML."""

    # ------------------------------------------------------------------
    # Serialization (Letter → dict)
    # ------------------------------------------------------------------

    def to_dict(self, letter: Letter) -> dict[str, Any]:
        """Serialize a ``Letter`` to a JSON-compatible dict."""
        return {
            "id": letter.id,
            "fromMe": letter.authored_by_local_user,
            "content": letter.content,
            "createdAt": _timestamp_to_str(letter.created_at),
            "unlockAt": _timestamp_to_str(letter.unlock_at),
            "requiresHome": letter.requires_home_gate,
            "styleId": letter.style_id,
            "inkUsed": letter.ink_used,
            "openedAt": _timestamp_to_str(letter.opened_at) if letter.opened_at else None,
        }

    # ------------------------------------------------------------------
    # Deserialization (dict → Letter)
    # ------------------------------------------------------------------

    def from_dict(self, data: Any) -> Letter:
        """Deserialize a ``Letter`` from a plain dict.

        Raises
        ------
        LetterDecodeError
            If a required key is missing or a value has the wrong type.
        """
        if not isinstance(data, dict):
            raise LetterDecodeError(f"expected an object, got {type(data).__name__}")
        missing = [key for key in _REQUIRED_KEYS if key not in data]
        if missing:
            raise LetterDecodeError(f"missing key(s): {', '.join(missing)}")

        opened_raw = data.get("openedAt")
        style_id = data.get("styleId")
        if style_id is not None:
            _expect(style_id, str, "styleId")

        try:
            return Letter(
                id=_expect(data["id"], str, "id"),
                authored_by_local_user=_expect(data["fromMe"], bool, "fromMe"),
                content=_expect(data["content"], str, "content"),
                created_at=_timestamp_from_str(data["createdAt"], "createdAt"),
                unlock_at=_timestamp_from_str(data["unlockAt"], "unlockAt"),
                requires_home_gate=_expect(data["requiresHome"], bool, "requiresHome"),
                ink_used=_expect(data["inkUsed"], int, "inkUsed"),
                opened_at=(
                    _timestamp_from_str(opened_raw, "openedAt") if opened_raw is not None else None
                ),
                style_id=style_id,
            )
        except LetterDecodeError:
            raise
        except ValueError as exc:
            raise LetterDecodeError(str(exc)) from exc

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------

    def to_json(self, letter: Letter, indent: int | None = 2) -> str:
        """Serialize a ``Letter`` to a JSON string."""
        return json.dumps(self.to_dict(letter), indent=indent, ensure_ascii=False)

    def from_json(self, text: str) -> Letter:
        """Deserialize a ``Letter`` from a JSON string."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise LetterDecodeError(f"invalid JSON: {exc.msg}") from exc
        return self.from_dict(data)

    # ------------------------------------------------------------------
    # YAML helpers
    # ------------------------------------------------------------------

    def to_yaml(self, letter: Letter) -> str:
        """Serialize a ``Letter`` to a YAML string."""
        return yaml.dump(
            self.to_dict(letter), default_flow_style=False, allow_unicode=True, sort_keys=False
        )

    def from_yaml(self, text: str) -> Letter:
        """Deserialize a ``Letter`` from a YAML string."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise LetterDecodeError(f"invalid YAML: {exc}") from exc
        return self.from_dict(data)
