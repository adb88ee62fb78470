"""Command-line interface for jianjian."""
from __future__ import annotations
