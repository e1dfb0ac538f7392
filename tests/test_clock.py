from __future__ import annotations

import threading

import pytest

from senselog.core.clock import run_fixed_rate


class FakeClock:
    """Monotonic clock that only moves when something sleeps or works."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_ticks_once_per_period_for_duration() -> None:
    clock = FakeClock()
    seen: list[float] = []

    ticks = run_fixed_rate(seen.append, 10.0, duration_s=1.0, clock=clock, sleep=clock.sleep)

    assert ticks == 10
    assert seen == pytest.approx([i * 0.1 for i in range(10)])
    # no drift: every deadline is hit exactly
    assert clock.now == pytest.approx(100.9)


def test_overrun_skips_missed_deadlines() -> None:
    clock = FakeClock()
    seen: list[float] = []

    def slow_tick(elapsed: float) -> None:
        seen.append(elapsed)
        if len(seen) == 2:
            clock.now += 0.35  # blows through three deadlines

    ticks = run_fixed_rate(slow_tick, 10.0, duration_s=1.0, clock=clock, sleep=clock.sleep)

    # deadlines 0.2 and 0.3 are dropped; 0.4 runs late, then the schedule resumes
    assert seen[:4] == pytest.approx([0.0, 0.1, 0.45, 0.5])
    assert ticks == 8
    assert seen[-1] == pytest.approx(0.9)


def test_max_ticks_stops_the_loop() -> None:
    clock = FakeClock()
    ticks = run_fixed_rate(lambda _: None, 50.0, max_ticks=3, clock=clock, sleep=clock.sleep)
    assert ticks == 3


def test_stop_event_ends_the_loop() -> None:
    clock = FakeClock()
    stop = threading.Event()
    seen: list[float] = []

    def tick(elapsed: float) -> None:
        seen.append(elapsed)
        if len(seen) == 4:
            stop.set()

    ticks = run_fixed_rate(tick, 20.0, stop_event=stop, clock=clock, sleep=clock.sleep)
    assert ticks == 4


def test_zero_duration_never_ticks() -> None:
    clock = FakeClock()
    assert run_fixed_rate(lambda _: None, 10.0, duration_s=0.0, clock=clock, sleep=clock.sleep) == 0


@pytest.mark.parametrize("rate", [0.0, -5.0])
def test_invalid_rate_rejected(rate: float) -> None:
    with pytest.raises(ValueError):
        run_fixed_rate(lambda _: None, rate, max_ticks=1)


def test_tick_errors_propagate() -> None:
    clock = FakeClock()

    def boom(_: float) -> None:
        raise RuntimeError("collector failed")

    with pytest.raises(RuntimeError):
        run_fixed_rate(boom, 10.0, duration_s=1.0, clock=clock, sleep=clock.sleep)
