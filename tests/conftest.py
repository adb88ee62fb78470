"""Fixtures for the jianjian suite.

Everything runs against a manual clock that starts on a Monday morning in
UTC, a letter store under ``tmp_path``, and in-memory scheduler and home
flag doubles, so no test depends on the real time or the user's data dir.
"""
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from jianjian.letters.letter import Letter
from jianjian.notify.scheduler import InMemoryScheduler
from jianjian.service.lifecycle import LifecycleService
from jianjian.store.home_flag import InMemoryHomeFlag
from jianjian.store.letter_store import LetterStore
from jianjian.timing.clock import ManualClock

# A Monday morning, so week-boundary arithmetic is easy to follow.
START = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


@pytest.fixture()
def package_name() -> str:
    """Name of the import package under test."""
    return "jianjian"


@pytest.fixture()
def expected_version() -> str:
    """Version string ``jianjian.__version__`` and pyproject.toml must agree on."""
    return "0.1.0"


@pytest.fixture()
def start() -> datetime:
    return START


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(START)


@pytest.fixture()
def store(tmp_path: Path) -> LetterStore:
    return LetterStore(tmp_path / "letters")


@pytest.fixture()
def scheduler() -> InMemoryScheduler:
    return InMemoryScheduler()


@pytest.fixture()
def home() -> InMemoryHomeFlag:
    return InMemoryHomeFlag(True)


@pytest.fixture()
def service(
    store: LetterStore,
    scheduler: InMemoryScheduler,
    home: InMemoryHomeFlag,
    clock: ManualClock,
) -> LifecycleService:
    return LifecycleService(
        store=store,
        scheduler=scheduler,
        home_flag=home,
        clock=clock,
        weekly_ink_limit=600,
        typing_chars_per_second=2.0,
        tz=timezone.utc,
    )


@pytest.fixture()
def make_letter() -> Callable[..., Letter]:
    """Return a factory for letters with sensible defaults."""

    counter = iter(range(1, 10_000))

    def _make(
        *,
        content: str = "Dear friend, the plum trees are blooming.",
        created_at: datetime = START,
        delay: timedelta = timedelta(days=1),
        requires_home_gate: bool = True,
        authored_by_local_user: bool = True,
        opened_at: datetime | None = None,
        letter_id: str | None = None,
        ink_used: int | None = None,
    ) -> Letter:
        return Letter(
            id=letter_id or f"letter-{next(counter):04d}",
            authored_by_local_user=authored_by_local_user,
            content=content,
            created_at=created_at,
            unlock_at=created_at + delay,
            requires_home_gate=requires_home_gate,
            ink_used=len(content) if ink_used is None else ink_used,
            opened_at=opened_at,
        )

    return _make
