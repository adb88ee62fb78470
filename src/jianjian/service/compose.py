"""Compose sessions.

A ``ComposeSession`` is the editor-side handle for one draft.  It owns the
throttle state for that draft only; two sessions never share state.  The
session ends on ``submit`` or ``cancel``, after which it refuses further
input.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from jianjian.delivery.policy import Route
from jianjian.errors import ComposeSessionClosedError
from jianjian.ratelimit.limiter import RateLimiterState, RateLimitResult

if TYPE_CHECKING:
    from jianjian.letters.letter import Letter
    from jianjian.service.lifecycle import LifecycleService


class ComposeSession:
    """One in-progress draft.

    Created by ``LifecycleService.begin_compose``; not meant to be built
    directly.
    """

    def __init__(self, service: "LifecycleService", state: RateLimiterState) -> None:
        self._service = service
        self.state = state
        self.was_throttled = False
        self._closed = False

    @property
    def committed_text(self) -> str:
        return self.state.committed_text

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ComposeSessionClosedError()

    def update(self, proposed_text: str) -> RateLimitResult:
        """Offer a new version of the whole draft; see ``LifecycleService.compose``."""
        self._check_open()
        return self._service.compose(self, proposed_text)

    def append(self, text: str) -> RateLimitResult:
        """Offer the committed text with ``text`` added at the end."""
        return self.update(self.committed_text + text)

    def submit(self, route: Route) -> "Letter | None":
        """Send the committed text.

        Returns ``None`` (and keeps the session open) when the committed
        text is blank.
        """
        self._check_open()
        letter = self._service.submit(self.committed_text, route)
        if letter is not None:
            self._closed = True
        return letter

    def cancel(self) -> None:
        """Discard the draft."""
        self._closed = True

    def __repr__(self) -> str:
        return (
            f"ComposeSession(committed={len(self.committed_text)} chars, "
            f"throttled={self.was_throttled}, closed={self._closed})"
        )
