"""Typing-speed throttle with a hard ink ceiling.

Each keystroke in the editor produces a *proposed* replacement of the whole
draft.  ``RateLimiter.apply`` decides how much of that proposal becomes the
committed text:

1. The proposal is cut to the remaining weekly ink (hard cap).
2. A proposal no longer than the committed text is a deletion and is always
   accepted in full.
3. Additions draw from a token bucket refilled at ``rate_per_second``.  The
   fractional remainder of the bucket is carried into the next call, so
   slow steady typing is never systematically under-granted.

Characters are counted as Unicode code points (``len(str)``).

Usage
-----
::

    limiter = RateLimiter(rate_per_second=2.0)
    state = RateLimiterState.start(clock.now())
    result = limiter.apply(draft, state, clock.now(), remaining_quota=600)
    state = result.state
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RateLimiterState:
    """Per-session throttle state.

    Parameters
    ----------
    committed_text:
        The longest prefix of the draft accepted so far.
    last_accept_at:
        When the committed text last changed (or the session began).
    carryover:
        Fractional allowance left over from the previous acceptance.
    """

    committed_text: str
    last_accept_at: datetime
    carryover: float = 0.0

    @classmethod
    def start(cls, now: datetime, prefill: str = "") -> "RateLimiterState":
        """Return a fresh state for a new composition session.

        ``prefill`` is committed immediately without drawing on the bucket.
        """
        return cls(committed_text=prefill, last_accept_at=now, carryover=0.0)


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    """Outcome of a single ``RateLimiter.apply`` call."""

    committed_text: str
    state: RateLimiterState
    was_throttled: bool

    @property
    def accepted_all(self) -> bool:
        return not self.was_throttled


class RateLimiter:
    """Token-bucket throttle for draft text.

    Parameters
    ----------
    rate_per_second:
        Characters credited to the bucket per elapsed second.
    """

    def __init__(self, rate_per_second: float = 2.0) -> None:
        if rate_per_second <= 0:
            raise ValueError(f"rate_per_second must be positive, got {rate_per_second!r}")
        self._rate = float(rate_per_second)

    @property
    def rate_per_second(self) -> float:
        return self._rate

    def allowance(self, state: RateLimiterState, now: datetime) -> float:
        """Return the (fractional) number of characters available at ``now``.

        Time running backwards earns nothing.
        """
        elapsed = max(0.0, (now - state.last_accept_at).total_seconds())
        return elapsed * self._rate + state.carryover

    def apply(
        self,
        proposed_text: str,
        state: RateLimiterState,
        now: datetime,
        remaining_quota: int,
    ) -> RateLimitResult:
        """Decide how much of ``proposed_text`` to commit.

        Parameters
        ----------
        proposed_text:
            The full draft as the editor would like it to be.
        state:
            The session's current throttle state.
        now:
            The current instant.
        remaining_quota:
            Characters left in the weekly ink allowance.  The committed text
            never grows past this length.

        Returns
        -------
        RateLimitResult
            The new committed text, the new state, and whether any part of
            the proposal was held back by the throttle.
        """
        capped = proposed_text[: max(0, remaining_quota)]
        committed = state.committed_text

        if len(capped) <= len(committed):
            new_state = replace(state, committed_text=capped, last_accept_at=now)
            return RateLimitResult(committed_text=capped, state=new_state, was_throttled=False)

        allowance = self.allowance(state, now)
        requested = len(capped) - len(committed)
        allowed = math.floor(allowance)

        if allowed <= 0:
            logger.debug(
                "Throttled: %d char(s) requested, allowance %.3f", requested, allowance
            )
            return RateLimitResult(committed_text=committed, state=state, was_throttled=True)

        accepted = min(allowed, requested)
        addition = capped[len(committed): len(committed) + accepted]
        new_committed = committed + addition
        new_state = RateLimiterState(
            committed_text=new_committed,
            last_accept_at=now,
            carryover=allowance - accepted,
        )
        if accepted < requested:
            logger.debug("Accepted %d of %d char(s)", accepted, requested)
        return RateLimitResult(
            committed_text=new_committed,
            state=new_state,
            was_throttled=accepted < requested,
        )
