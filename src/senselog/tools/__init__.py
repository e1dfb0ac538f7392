"""Developer helpers."""

from .debug import debug_enabled, time_block

__all__ = ["debug_enabled", "time_block"]
