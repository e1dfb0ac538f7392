"""Fixed-rate tick loop for the recording session."""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

WARN_EVERY = 50


def run_fixed_rate(
    tick: Callable[[float], None],
    rate_hz: float,
    *,
    duration_s: Optional[float] = None,
    max_ticks: Optional[int] = None,
    stop_event: Optional[threading.Event] = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Call ``tick(elapsed_s)`` at ``rate_hz`` until stopped; return the tick count.

    Deadlines are ``start + n / rate_hz``, so small sleep errors never
    accumulate into drift. When a tick overruns past one or more deadlines
    those deadlines are skipped and the loop resumes at the latest one
    instead of bursting to catch up.

    The loop stops after ``duration_s`` worth of deadlines, after
    ``max_ticks`` ticks, or once ``stop_event`` is set. Exceptions from
    ``tick`` propagate.
    """
    if not rate_hz > 0:
        raise ValueError(f"rate_hz must be positive, got {rate_hz!r}")
    period = 1.0 / float(rate_hz)

    deadline_count: Optional[int] = None
    if duration_s is not None:
        deadline_count = max(0, math.ceil(float(duration_s) * rate_hz - 1e-9))

    start = clock()
    n = 0
    ticks = 0
    skipped = 0
    while True:
        if stop_event is not None and stop_event.is_set():
            break
        if deadline_count is not None and n >= deadline_count:
            break
        if max_ticks is not None and ticks >= max_ticks:
            break

        delay = start + n * period - clock()
        if delay > 0:
            sleep(delay)
            if stop_event is not None and stop_event.is_set():
                break

        tick(clock() - start)
        ticks += 1
        n += 1

        latest = int((clock() - start) / period)
        if latest > n:
            missed = latest - n
            if skipped // WARN_EVERY != (skipped + missed) // WARN_EVERY or skipped == 0:
                logger.warning("Tick loop behind schedule, skipping %d deadline(s) (total=%d)", missed, skipped + missed)
            skipped += missed
            n = latest

    logger.debug("Tick loop finished: %d ticks, %d skipped deadlines", ticks, skipped)
    return ticks


__all__ = ["run_fixed_rate"]
