"""Delivery routes and unlock-time computation."""
from __future__ import annotations

from jianjian.delivery.policy import Route, unlock_instant

__all__ = ["Route", "unlock_instant"]
