"""Composition throttle: weekly ink cap plus a typing-speed token bucket."""
from __future__ import annotations

from jianjian.ratelimit.limiter import RateLimiter, RateLimiterState, RateLimitResult

__all__ = ["RateLimiter", "RateLimiterState", "RateLimitResult"]
