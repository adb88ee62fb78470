"""The letter lifecycle service.

``LifecycleService`` is the only component that changes state.  It:

- throttles drafts against the weekly ink quota and typing speed,
- turns a finished draft into a stored ``Letter`` with its unlock time,
- opens letters once they are ready (and the home gate allows it),
- keeps unlock notifications in step with the stored letters.

Collaborators (store, scheduler, home flag, clock) are injected, so the
service holds no ambient global state.

Usage
-----
::

    service = LifecycleService(
        store=LetterStore(tmp_dir),
        scheduler=InMemoryScheduler(),
        home_flag=InMemoryHomeFlag(),
        clock=ManualClock(start),
    )
    session = service.begin_compose()
    session.update("Dear friend,")
    letter = session.submit(Route.LOCAL_1D)
"""
from __future__ import annotations

import logging
from datetime import datetime, tzinfo

from jianjian.config import (
    DEFAULT_TYPING_CHARS_PER_SECOND,
    DEFAULT_WEEKLY_INK_LIMIT,
    JianjianConfig,
)
from jianjian.delivery.policy import Route, unlock_instant
from jianjian.errors import InvalidLetterIdError, LetterNotFoundError
from jianjian.letters.letter import Letter, Status, can_open, raw_status, status
from jianjian.notify.scheduler import FileScheduler, NotificationScheduler, NullScheduler
from jianjian.ratelimit.limiter import RateLimiter, RateLimiterState, RateLimitResult
from jianjian.service.compose import ComposeSession
from jianjian.store.home_flag import FileHomeFlag, HomeFlagStore, InMemoryHomeFlag
from jianjian.store.letter_store import LetterStore
from jianjian.timing.calendar import start_of_week
from jianjian.timing.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

REPLY_EXCERPT_LENGTH = 24


class LifecycleService:
    """Coordinates composing, sending and opening letters.

    Parameters
    ----------
    store:
        Where letters live.
    scheduler:
        Receives unlock reminders.  Defaults to ``NullScheduler``.
    home_flag:
        The "at home" flag.  Defaults to an in-memory flag set to ``True``.
    clock:
        Source of the current instant.  Defaults to ``SystemClock(tz)``.
    weekly_ink_limit:
        Characters a local author may write per week.
    typing_chars_per_second:
        Typing throttle refill rate.
    tz:
        Zone for calendar arithmetic (unlock days, week start).  ``None``
        uses the system zone.
    notification_title, notification_body:
        Text of the unlock reminder.
    """

    def __init__(
        self,
        store: LetterStore,
        scheduler: NotificationScheduler | None = None,
        home_flag: HomeFlagStore | None = None,
        clock: Clock | None = None,
        *,
        weekly_ink_limit: int = DEFAULT_WEEKLY_INK_LIMIT,
        typing_chars_per_second: float = DEFAULT_TYPING_CHARS_PER_SECOND,
        tz: tzinfo | None = None,
        notification_title: str = "Your letter has arrived",
        notification_body: str = "This letter can now be opened at home.",
    ) -> None:
        self.store = store
        self.scheduler: NotificationScheduler = scheduler or NullScheduler()
        self.home: HomeFlagStore = home_flag or InMemoryHomeFlag()
        self.clock: Clock = clock or SystemClock(tz)
        self.weekly_ink_limit = weekly_ink_limit
        self.limiter = RateLimiter(typing_chars_per_second)
        self.tz = tz
        self.notification_title = notification_title
        self.notification_body = notification_body

    @classmethod
    def from_config(cls, config: JianjianConfig, clock: Clock | None = None) -> "LifecycleService":
        """Build a service backed by files under ``config.data_dir``."""
        tz = config.zone()
        return cls(
            store=LetterStore(config.letters_dir),
            scheduler=FileScheduler(config.notifications_path),
            home_flag=FileHomeFlag(config.home_flag_path),
            clock=clock,
            weekly_ink_limit=config.weekly_ink_limit,
            typing_chars_per_second=config.typing_chars_per_second,
            tz=tz,
            notification_title=config.notification_title,
            notification_body=config.notification_body,
        )

    def __repr__(self) -> str:
        return f"LifecycleService(store={self.store!r}, clock={self.clock!r})"

    # ------------------------------------------------------------------
    # Ink accounting
    # ------------------------------------------------------------------

    def week_start(self, now: datetime | None = None) -> datetime:
        """Return Monday 00:00 of the current local week."""
        return start_of_week(now or self.clock.now(), self.tz)

    def weekly_ink_used(self, now: datetime | None = None) -> int:
        """Return ink spent by the local author since the start of the week."""
        start = self.week_start(now)
        return sum(
            letter.ink_used
            for letter in self.store.load_all()
            if letter.authored_by_local_user and letter.created_at >= start
        )

    def remaining_ink(self, now: datetime | None = None) -> int:
        return max(0, self.weekly_ink_limit - self.weekly_ink_used(now))

    # ------------------------------------------------------------------
    # Composing
    # ------------------------------------------------------------------

    def begin_compose(self, prefill: str = "") -> ComposeSession:
        """Start a new draft with fresh throttle state.

        ``prefill`` (for example a reply quote) is committed without going
        through the throttle.
        """
        return ComposeSession(self, RateLimiterState.start(self.clock.now(), prefill))

    def compose(self, session: ComposeSession, proposed_text: str) -> RateLimitResult:
        """Apply a draft change to ``session`` under the ink cap and throttle."""
        now = self.clock.now()
        result = self.limiter.apply(proposed_text, session.state, now, self.remaining_ink(now))
        session.state = result.state
        session.was_throttled = result.was_throttled
        return result

    def submit(self, committed_text: str, route: Route) -> Letter | None:
        """Store a new letter and schedule its unlock reminder.

        Returns ``None`` without doing anything when the text is blank.

        Raises
        ------
        LetterStoreError
            If the letter could not be saved.  No reminder is scheduled.
        """
        if not committed_text.strip():
            logger.debug("Ignoring submit of blank draft")
            return None
        now = self.clock.now()
        letter = Letter.new(
            content=committed_text,
            created_at=now,
            unlock_at=unlock_instant(now, route, self.tz),
            authored_by_local_user=True,
            requires_home_gate=True,
            ink_used=len(committed_text),
        )
        self.store.save(letter)
        logger.info(
            "Letter %s sent via %s; unlocks at %s",
            letter.id,
            route.value,
            letter.unlock_at.isoformat(),
        )
        self._schedule(letter)
        return letter

    # ------------------------------------------------------------------
    # Reading and opening
    # ------------------------------------------------------------------

    def get(self, letter_id: str) -> Letter | None:
        """Return the stored letter, or ``None`` for unknown or invalid ids."""
        try:
            return self.store.get(letter_id)
        except InvalidLetterIdError:
            return None

    def require(self, letter_id: str) -> Letter:
        """Return the stored letter.

        Raises
        ------
        LetterNotFoundError
            If no readable letter is stored under ``letter_id``.
        """
        letter = self.get(letter_id)
        if letter is None:
            raise LetterNotFoundError(letter_id)
        return letter

    def letters(self, status_filter: Status | None = None) -> list[Letter]:
        """Return all letters, newest first, optionally filtered.

        The filter compares against ``raw_status`` (time and open-state).
        """
        letters = self.store.load_all()
        if status_filter is None:
            return letters
        now = self.clock.now()
        return [letter for letter in letters if raw_status(letter, now) is status_filter]

    def status_of(self, letter: Letter) -> Status:
        """Return ``letter``'s status now, honouring the home gate."""
        return status(letter, self.clock.now(), self.home.get())

    def open(self, letter_id: str) -> Letter | None:
        """Open a ready letter.

        Returns the opened letter, or ``None`` if the letter does not exist
        or is not ready (still in transit, or gated while away from home).
        Already-opened letters are not ready, so a second call is a no-op.
        """
        letter = self.get(letter_id)
        if letter is None:
            return None
        now = self.clock.now()
        if not can_open(letter, now, self.home.get()):
            logger.debug("Letter %s is not ready to open", letter_id)
            return None
        opened = self.store.mark_opened(letter_id, now)
        self._cancel(letter_id)
        logger.info("Letter %s opened", letter_id)
        return opened

    def discard(self, letter_id: str) -> bool:
        """Delete a letter and cancel its reminder.  ``False`` if unknown."""
        if self.get(letter_id) is None:
            return False
        self.store.delete(letter_id)
        self._cancel(letter_id)
        logger.info("Letter %s discarded", letter_id)
        return True

    # ------------------------------------------------------------------
    # Home flag
    # ------------------------------------------------------------------

    def home_flag(self) -> bool:
        return self.home.get()

    def set_home_flag(self, value: bool) -> None:
        """Update the home flag.  Letters are not touched."""
        self.home.set(value)

    # ------------------------------------------------------------------
    # Notifications and replies
    # ------------------------------------------------------------------

    def resync(self, letter_id: str) -> bool:
        """Schedule the reminder for a letter stored by another process.

        Returns ``True`` if a reminder was scheduled; letters that are
        unknown, opened or already unlocked are skipped.
        """
        letter = self.get(letter_id)
        if letter is None or letter.is_opened:
            return False
        if letter.unlock_at <= self.clock.now():
            return False
        self._schedule(letter)
        return True

    def reply_prefill(self, letter_id: str) -> str | None:
        """Return a quoted excerpt to start a reply to an opened letter."""
        letter = self.get(letter_id)
        if letter is None or not letter.is_opened:
            return None
        excerpt = letter.content[:REPLY_EXCERPT_LENGTH]
        more = "…" if len(letter.content) > REPLY_EXCERPT_LENGTH else ""
        return f"\n\nIn reply to:\n> {excerpt}{more}\n\n"

    def _schedule(self, letter: Letter) -> None:
        try:
            self.scheduler.schedule(
                letter.id, self.notification_title, self.notification_body, letter.unlock_at
            )
        except Exception:
            logger.warning("Could not schedule reminder for letter %s", letter.id, exc_info=True)

    def _cancel(self, letter_id: str) -> None:
        try:
            self.scheduler.cancel(letter_id)
        except Exception:
            logger.warning("Could not cancel reminder for letter %s", letter_id, exc_info=True)
