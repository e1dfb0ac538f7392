"""Opt-in timing hooks, switched on with ``SENSELOG_DEBUG=1``."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Callable, Iterator

DEBUG_ENV = "SENSELOG_DEBUG"
_TRUTHY = {"1", "true", "yes", "on"}

logger = logging.getLogger(__name__)


def debug_enabled() -> bool:
    """Return True when lightweight instrumentation should run."""
    return os.getenv(DEBUG_ENV, "").strip().lower() in _TRUTHY


@contextmanager
def time_block(label: str, *, emitter: Callable[[str], None] | None = None) -> Iterator[None]:
    """
    Context manager that reports elapsed time when debugging is enabled.

    Disabled, it costs one environment lookup.
    """
    if not debug_enabled():
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        message = f"[DEBUG] {label} took {elapsed_ms:.3f} ms"
        if emitter is None:
            logger.info(message)
        else:
            emitter(message)
