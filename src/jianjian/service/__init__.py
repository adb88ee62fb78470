"""Lifecycle orchestration: composing, sending and opening letters."""
from __future__ import annotations

from jianjian.service.compose import ComposeSession
from jianjian.service.lifecycle import LifecycleService

__all__ = ["LifecycleService", "ComposeSession"]
