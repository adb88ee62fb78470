"""Tests for the jianjian command-line interface."""
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from jianjian.cli.main import cli, parse_save_url
from jianjian.letters.letter import Letter
from jianjian.store.letter_store import LetterStore


# ===========================================================================
# Helpers
# ===========================================================================


class _TickingClock:
    """Moves one minute forward on every reading."""

    def __init__(self, tz: object = None) -> None:
        self._now = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        self._now += timedelta(minutes=1)
        return self._now


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "config.yaml"


@pytest.fixture()
def invoke(data_dir: Path, config_path: Path) -> Callable[..., Result]:
    runner = CliRunner(env={"JIANJIAN_DATA_DIR": str(data_dir), "JIANJIAN_LOG_LEVEL": None})

    def _invoke(*args: str, input: str | None = None) -> Result:
        return runner.invoke(cli, ["--config", str(config_path), *args], input=input)

    return _invoke


def _stored(data_dir: Path) -> list[Letter]:
    return LetterStore(data_dir / "letters").load_all()


def _arrived_letter(data_dir: Path, letter_id: str = "arrived-1", **kwargs: object) -> Letter:
    now = datetime.now(timezone.utc)
    letter = Letter(
        id=letter_id,
        authored_by_local_user=False,
        content="The plum trees are blooming.",
        created_at=now - timedelta(days=3),
        unlock_at=now - timedelta(days=2),
        requires_home_gate=True,
        ink_used=28,
        **kwargs,  # type: ignore[arg-type]
    )
    LetterStore(data_dir / "letters").save(letter)
    return letter


# ===========================================================================
# version / config
# ===========================================================================


class TestVersion:
    def test_version_command(self, invoke: Callable[..., Result]) -> None:
        result = invoke("version")
        assert result.exit_code == 0
        assert "jianjian" in result.output
        assert "0.1.0" in result.output


class TestConfigErrors:
    def test_bad_config_exits(self, invoke: Callable[..., Result], config_path: Path) -> None:
        config_path.write_text("ink: 5\n", encoding="utf-8")
        result = invoke("ink")
        assert result.exit_code == 1
        assert "Config error" in result.output


# ===========================================================================
# write / compose
# ===========================================================================


class TestWrite:
    def test_sends_letter(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        result = invoke("write", "Dear friend", "--route", "province3d")
        assert result.exit_code == 0, result.output
        assert "Sent" in result.output
        letters = _stored(data_dir)
        assert len(letters) == 1
        assert letters[0].content == "Dear friend"
        assert letters[0].unlock_at - letters[0].created_at >= timedelta(days=3) - timedelta(hours=1)

    def test_blank_rejected(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        result = invoke("write", "   ")
        assert result.exit_code == 1
        assert "empty" in result.output
        assert _stored(data_dir) == []

    def test_ink_limit(
        self, invoke: Callable[..., Result], config_path: Path, data_dir: Path
    ) -> None:
        config_path.write_text("weekly_ink_limit: 3\n", encoding="utf-8")
        result = invoke("write", "too long")
        assert result.exit_code == 1
        assert "Not enough ink" in result.output
        assert _stored(data_dir) == []

    def test_schedules_reminder(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        invoke("write", "hello")
        letter_id = _stored(data_dir)[0].id
        result = invoke("notifications")
        assert result.exit_code == 0
        assert letter_id[:8] in result.output


class TestCompose:
    def test_fast_typing_sends_nothing(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        result = invoke("compose", input="Dear friend, I write in haste\n\n")
        assert result.exit_code == 1
        assert "Nothing written" in result.output
        assert _stored(data_dir) == []

    def test_paced_typing_sends(
        self,
        invoke: Callable[..., Result],
        data_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr("jianjian.service.lifecycle.SystemClock", _TickingClock)
        result = invoke("compose", "--route", "nation7d", input="Dear friend\nSee you soon\n\n")
        assert result.exit_code == 0, result.output
        assert "Sent" in result.output
        letters = _stored(data_dir)
        assert [l.content for l in letters] == ["Dear friend\nSee you soon"]

    def test_eof_discards_draft(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        result = invoke("compose", input="")
        assert result.exit_code == 1
        assert "Draft discarded" in result.output
        assert _stored(data_dir) == []

    def test_reply_to_unopened_warns(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        _arrived_letter(data_dir)
        result = invoke("compose", "--reply-to", "arrived-1", input="")
        assert "starting blank" in result.output

    def test_reply_to_opened_shows_quote(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        _arrived_letter(data_dir, opened_at=datetime.now(timezone.utc) - timedelta(days=1))
        result = invoke("compose", "--reply-to", "arrived-1", input="")
        assert "Replying" in result.output
        assert "The plum trees" in result.output


# ===========================================================================
# list / show / open
# ===========================================================================


class TestListShowOpen:
    def test_empty_list(self, invoke: Callable[..., Result]) -> None:
        result = invoke("list")
        assert result.exit_code == 0
        assert "No letters yet" in result.output

    def test_list_shows_state(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        invoke("write", "hello")
        _arrived_letter(data_dir)
        result = invoke("list")
        assert result.exit_code == 0
        assert "in transit" in result.output
        assert "ready" in result.output

    def test_list_filter(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        invoke("write", "hello")
        _arrived_letter(data_dir)
        result = invoke("list", "--status", "ready")
        assert "arrived-1" in result.output
        assert "in transit" not in result.output

    def test_show_hides_unopened_text(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        _arrived_letter(data_dir)
        result = invoke("show", "arrived-1")
        assert result.exit_code == 0
        assert "can be opened now" in result.output
        assert "plum" not in result.output

    def test_open_ready_letter(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        _arrived_letter(data_dir)
        result = invoke("open", "arrived-1")
        assert result.exit_code == 0, result.output
        assert "plum trees" in result.output
        assert _stored(data_dir)[0].opened_at is not None

        again = invoke("open", "arrived-1")
        assert again.exit_code == 1
        assert "already opened" in again.output

    def test_open_in_transit(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        invoke("write", "hello")
        letter_id = _stored(data_dir)[0].id
        result = invoke("open", letter_id)
        assert result.exit_code == 1
        assert "Not yet" in result.output
        assert "unlocks in" in result.output

    def test_open_while_away(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        _arrived_letter(data_dir)
        invoke("home", "off")
        result = invoke("open", "arrived-1")
        assert result.exit_code == 1
        assert "once you are home" in result.output

    def test_unknown_letter(self, invoke: Callable[..., Result]) -> None:
        result = invoke("show", "nope")
        assert result.exit_code == 1
        assert "No letter with id" in result.output


# ===========================================================================
# home / ink / export / handle-url / discard
# ===========================================================================


class TestHomeAndInk:
    def test_home_defaults_on(self, invoke: Callable[..., Result]) -> None:
        assert "At home: on" in invoke("home").output

    def test_home_persists(self, invoke: Callable[..., Result]) -> None:
        assert "At home: off" in invoke("home", "off").output
        assert "At home: off" in invoke("home").output

    def test_ink(self, invoke: Callable[..., Result]) -> None:
        invoke("write", "hello")
        result = invoke("ink")
        assert result.exit_code == 0
        assert "595/600" in result.output


class TestExport:
    def test_json(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        _arrived_letter(data_dir)
        result = invoke("export", "arrived-1")
        assert result.exit_code == 0
        assert '"fromMe": false' in result.output

    def test_yaml(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        _arrived_letter(data_dir)
        result = invoke("export", "arrived-1", "--format", "yaml")
        assert result.exit_code == 0
        assert "fromMe: false" in result.output


class TestHandleUrl:
    def test_parse_save_url(self) -> None:
        assert parse_save_url("jian://save?id=abc123") == "abc123"
        assert parse_save_url("JIAN://save?id=abc123") == "abc123"
        assert parse_save_url("jian://open?id=abc123") is None
        assert parse_save_url("https://save?id=abc123") is None
        assert parse_save_url("jian://save") is None

    def test_schedules_future_letter(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        now = datetime.now(timezone.utc)
        letter = Letter.new(content="from the widget", created_at=now, unlock_at=now + timedelta(days=3))
        LetterStore(data_dir / "letters").save(letter)
        result = invoke("handle-url", f"jian://save?id={letter.id}")
        assert result.exit_code == 0, result.output
        assert "Reminder scheduled" in result.output
        assert letter.id[:8] in invoke("notifications").output

    def test_arrived_letter_needs_no_reminder(
        self, invoke: Callable[..., Result], data_dir: Path
    ) -> None:
        _arrived_letter(data_dir)
        result = invoke("handle-url", "jian://save?id=arrived-1")
        assert result.exit_code == 0
        assert "no reminder needed" in result.output

    def test_bad_url(self, invoke: Callable[..., Result]) -> None:
        result = invoke("handle-url", "https://example.com")
        assert result.exit_code == 1


class TestDiscard:
    def test_discard(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        _arrived_letter(data_dir)
        result = invoke("discard", "arrived-1", "--yes")
        assert result.exit_code == 0
        assert _stored(data_dir) == []

    def test_discard_needs_confirmation(self, invoke: Callable[..., Result], data_dir: Path) -> None:
        _arrived_letter(data_dir)
        result = invoke("discard", "arrived-1", input="n\n")
        assert result.exit_code == 1
        assert len(_stored(data_dir)) == 1
