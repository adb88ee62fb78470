#!/usr/bin/env python3
"""Example: Quickstart — jianjian

Minimal working example: write a letter under the typing throttle, send it,
and open it once it has arrived.  A manual clock stands in for real time.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install jianjian
"""
from __future__ import annotations

import tempfile
from datetime import datetime, timezone

import jianjian
from jianjian.notify.scheduler import InMemoryScheduler
from jianjian.service.lifecycle import LifecycleService
from jianjian.store.home_flag import InMemoryHomeFlag
from jianjian.store.letter_store import LetterStore
from jianjian.timing.clock import ManualClock


def main() -> None:
    print(f"jianjian version: {jianjian.__version__}")

    clock = ManualClock(datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc))
    scheduler = InMemoryScheduler()
    home = InMemoryHomeFlag()
    with tempfile.TemporaryDirectory() as folder:
        service = LifecycleService(
            store=LetterStore(folder),
            scheduler=scheduler,
            home_flag=home,
            clock=clock,
            tz=timezone.utc,
        )

        # Step 1: Compose; typing faster than two characters a second is held back
        session = service.begin_compose()
        clock.advance(seconds=4)
        result = session.update("Dear friend, the plum trees are blooming.")
        print(f"Kept {result.committed_text!r} (throttled={result.was_throttled})")
        clock.advance(seconds=30)
        session.update("Dear friend, the plum trees are blooming.")

        # Step 2: Send over the three-day route
        letter = session.submit(jianjian.Route.PROVINCE_3D)
        assert letter is not None
        print(f"Sent {letter.id}; unlocks {letter.unlock_at:%Y-%m-%d %H:%M}")
        print(f"Ink left this week: {service.remaining_ink()}")
        print(f"Reminders pending: {[n.notification_id for n in scheduler.pending()]}")

        # Step 3: Too early
        print(f"Open now? {service.open(letter.id) is not None}")

        # Step 4: Three days later, away from home, then back home
        clock.advance(days=3)
        home.set(False)
        print(f"Status while away: {service.status_of(letter).value}")
        home.set(True)
        opened = service.open(letter.id)
        assert opened is not None
        print(f"Opened at {opened.opened_at:%Y-%m-%d %H:%M}: {opened.content}")


if __name__ == "__main__":
    main()
