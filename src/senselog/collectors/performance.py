from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..core.columns import MISSING, ColumnRegistry
from ..core.row_buffer import RowBuffer
from .base import BaseCollector, index_or_missing
from .sources import PerformanceSource

if TYPE_CHECKING:  # pragma: no cover
    from ..config.recording import RecordingOptions


class PerformanceCollector(BaseCollector):
    """``AppMotionToPhotonLatency`` in seconds; left empty when the runtime has no frame stats."""

    collector_name = "PerformanceCollector"

    def __init__(self, source: Optional[PerformanceSource]) -> None:
        super().__init__()
        self._source = source
        self._latency = MISSING

    def configure(self, registry: ColumnRegistry, options: "RecordingOptions") -> None:
        self._latency = index_or_missing(registry, "AppMotionToPhotonLatency")
        self._mark_configured(options.include_performance and self._source is not None and self._latency >= 0)

    def collect(self, row: RowBuffer, now: float) -> None:
        if not self._enabled:
            return
        latency = self._source.motion_to_photon_latency()
        if latency is not None:
            row.set_by_index(self._latency, latency)
