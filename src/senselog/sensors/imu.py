"""
MPU6050 line stream ingestion.

The Raspberry Pi logger streams JSON lines with (at least):

  - timestamp_ns : int   monotonic time in nanoseconds
  - t_s          : float seconds since the run started
  - sensor_id    : int   logical sensor index (1, 2, or 3)
  - ax, ay, az   : float linear acceleration in m/s²
  - gx, gy, gz   : float angular rate in deg/s

A logger started with ``--channels acc`` or ``--channels gyro`` omits the
other triple; those channels parse as ``None`` and stay absent downstream.

``parse_line()`` accepts those JSON lines and also the legacy
comma-separated format "timestamp_ns,ax,ay,az,gx,gy,gz". A background reader
feeds parsed samples into an :class:`ImuSampleCache`, which keeps only the
newest sample per sensor for the recording loop to pick up.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..collectors.sources import ImuReading
from ..tools.debug import debug_enabled

logger = logging.getLogger(__name__)

DEFAULT_SENSOR_ID = 1


@dataclass
class MpuSample:
    """One parsed line; channels the logger did not send are ``None``."""

    timestamp_ns: int
    ax: Optional[float]
    ay: Optional[float]
    az: Optional[float]
    gx: Optional[float]
    gy: Optional[float]
    gz: Optional[float]
    sensor_id: Optional[int] = None
    t_s: Optional[float] = None


def _parse_json_line(text: str) -> MpuSample | None:
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Bad JSON from sensor stream: %r (%s)", text, exc)
        return None
    if not isinstance(obj, dict):
        logger.debug("Skipping non-object JSON payload: %r", obj)
        return None

    ts_raw = obj.get("timestamp_ns")
    if ts_raw is None:
        logger.warning("Missing field %s in sensor line: %r", "timestamp_ns", obj)
        return None

    def _axis(name: str) -> Optional[float]:
        val = obj.get(name)
        if val is None:
            return None
        return float(val)

    try:
        timestamp_ns = int(ts_raw)
        sensor_id = obj.get("sensor_id")
        if sensor_id is not None:
            sensor_id = int(sensor_id)
        t_s = obj.get("t_s")
        if t_s is not None:
            t_s = float(t_s)
        sample = MpuSample(
            timestamp_ns=timestamp_ns,
            ax=_axis("ax"),
            ay=_axis("ay"),
            az=_axis("az"),
            gx=_axis("gx"),
            gy=_axis("gy"),
            gz=_axis("gz"),
            sensor_id=sensor_id,
            t_s=t_s,
        )
    except (TypeError, ValueError) as exc:
        logger.warning("Bad field value in sensor line %r (%s)", obj, exc)
        return None
    return sample


def _csv_axis(cell: str) -> Optional[float]:
    cell = cell.strip()
    return float(cell) if cell else None


def _parse_csv_line(text: str) -> MpuSample | None:
    parts: Sequence[str] = text.split(",")
    if len(parts) < 7:
        logger.warning(
            "Expected at least 7 comma-separated values for MPU6050 CSV, got %d: %r",
            len(parts),
            text,
        )
        return None
    try:
        ts = float(parts[0])
        ax, ay, az, gx, gy, gz = (_csv_axis(cell) for cell in parts[1:7])
    except ValueError as exc:
        logger.warning("Bad CSV field in sensor line %r (%s)", text, exc)
        return None
    return MpuSample(timestamp_ns=int(ts), ax=ax, ay=ay, az=az, gx=gx, gy=gy, gz=gz)


def parse_line(line: str) -> MpuSample | None:
    """
    Parse one text line from the MPU6050 logger into an :class:`MpuSample`.

    Invalid or blank lines return ``None`` so callers can skip them.
    """
    text = line.strip()
    if not text:
        return None
    if text[0] == "{":
        return _parse_json_line(text)
    return _parse_csv_line(text)


class ImuSampleCache:
    """
    Newest sample per sensor, safe to share between the reader thread and
    the recording loop.

    ``clock`` stamps each sample on arrival; :meth:`latest` compares against
    the same clock to drop stale readings.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._latest: Dict[int, ImuReading] = {}
        self._lock = threading.RLock()
        self._received = 0

    def update(self, sample: MpuSample) -> ImuReading:
        sensor_id = sample.sensor_id if sample.sensor_id is not None else DEFAULT_SENSOR_ID
        t_s = sample.t_s if sample.t_s is not None else sample.timestamp_ns * 1e-9
        reading = ImuReading(
            t_s=t_s,
            ax=sample.ax,
            ay=sample.ay,
            az=sample.az,
            gx=sample.gx,
            gy=sample.gy,
            gz=sample.gz,
            received_at=self._clock(),
        )
        with self._lock:
            self._latest[int(sensor_id)] = reading
            self._received += 1
        return reading

    def latest(self, sensor_id: int, max_age_s: Optional[float] = None) -> Optional[ImuReading]:
        with self._lock:
            reading = self._latest.get(int(sensor_id))
        if reading is None:
            return None
        if max_age_s is not None and self._clock() - reading.received_at > max_age_s:
            return None
        return reading

    def sensor_ids(self) -> List[int]:
        with self._lock:
            return sorted(self._latest)

    @property
    def received(self) -> int:
        with self._lock:
            return self._received

    def clear(self) -> None:
        with self._lock:
            self._latest.clear()


def reader_loop(
    stream: Iterable[str],
    cache: ImuSampleCache,
    *,
    stop_event: Optional[threading.Event] = None,
) -> int:
    """
    Parse lines from ``stream`` into ``cache`` until it ends or ``stop_event`` is set.

    Returns the number of samples accepted.
    """
    accepted = 0
    debug_on = debug_enabled()
    parse_time = 0.0
    for raw_line in stream:
        if stop_event is not None and stop_event.is_set():
            break
        start = time.perf_counter() if debug_on else 0.0
        sample = parse_line(raw_line)
        if sample is None:
            continue
        cache.update(sample)
        accepted += 1
        if debug_on:
            parse_time += time.perf_counter() - start
            if accepted % 1000 == 0:
                logger.info("imu parse avg %.1f µs over %d samples", parse_time / accepted * 1e6, accepted)
    return accepted


@dataclass
class ImuReaderHandle:
    thread: threading.Thread
    stop_event: threading.Event
    cache: ImuSampleCache

    def stop(self, *, join: bool = False, timeout: Optional[float] = None) -> None:
        self.stop_event.set()
        if join:
            self.thread.join(timeout)

    def is_alive(self) -> bool:
        return self.thread.is_alive()


def start_reader(
    stream: Iterable[str],
    *,
    cache: Optional[ImuSampleCache] = None,
    thread_name: Optional[str] = None,
) -> ImuReaderHandle:
    """Start a daemon thread that feeds ``stream`` into ``cache``."""
    store = cache if cache is not None else ImuSampleCache()
    stop_event = threading.Event()

    def _target() -> None:
        try:
            count = reader_loop(stream, store, stop_event=stop_event)
        except Exception:
            logger.exception("IMU reader stopped on error")
            raise
        logger.info("IMU reader finished after %d samples", count)

    thread = threading.Thread(target=_target, name=thread_name or "SenseLogImuReader", daemon=True)
    thread.start()
    return ImuReaderHandle(thread=thread, stop_event=stop_event, cache=store)


def start_reader_on_stdin(*, cache: Optional[ImuSampleCache] = None) -> ImuReaderHandle:
    """Convenience wrapper that starts the reader on ``sys.stdin``."""
    import sys

    return start_reader(sys.stdin, cache=cache, thread_name="SenseLogImuReader(stdin)")


__all__ = [
    "ImuReaderHandle",
    "ImuSampleCache",
    "MpuSample",
    "parse_line",
    "reader_loop",
    "start_reader",
    "start_reader_on_stdin",
]
