from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional, Tuple

from ..core.columns import ColumnRegistry
from ..core.row_buffer import RowBuffer
from .base import BaseCollector, any_resolved, indices, set_known_values
from .skeleton import IMU_CHANNELS
from .sources import ImuSampleSource

if TYPE_CHECKING:  # pragma: no cover
    from ..config.recording import RecordingOptions


class ImuCollector(BaseCollector):
    """
    ``Imu<sensor>_{ax,ay,az,gx,gy,gz,t_s}`` from the newest cached sample.

    Samples older than ``RecordingOptions.imu_max_age_s`` count as absent, so
    a stalled stream shows up as empty cells instead of a frozen value.
    Channels the sample does not carry (acc-only or gyro-only loggers) stay
    absent as well.
    """

    collector_name = "ImuCollector"

    def __init__(self, source: Optional[ImuSampleSource]) -> None:
        super().__init__()
        self._source = source
        self._max_age_s: Optional[float] = None
        self._sensors: Dict[int, Tuple[int, ...]] = {}

    def configure(self, registry: ColumnRegistry, options: "RecordingOptions") -> None:
        self._sensors = {}
        self._max_age_s = options.imu_max_age_s
        if options.include_imu and self._source is not None:
            for sensor_id in options.imu_sensors:
                cols = indices(registry, f"Imu{sensor_id}", IMU_CHANNELS)
                if any_resolved(cols):
                    self._sensors[int(sensor_id)] = cols
        self._mark_configured(bool(self._sensors))

    def collect(self, row: RowBuffer, now: float) -> None:
        if not self._enabled:
            return
        for sensor_id, cols in self._sensors.items():
            reading = self._source.latest(sensor_id, self._max_age_s)
            if reading is None:
                continue
            set_known_values(
                row,
                cols,
                (reading.ax, reading.ay, reading.az, reading.gx, reading.gy, reading.gz, reading.t_s),
            )

    def dispose(self) -> None:
        self._sensors.clear()
        super().dispose()
