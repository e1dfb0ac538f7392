"""Recenter request flag and its rising-edge pulse."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..core.columns import MISSING, ColumnRegistry
from ..core.row_buffer import RowBuffer
from .base import BaseCollector, index_or_missing, set_if_valid
from .sources import RecenterSource

if TYPE_CHECKING:  # pragma: no cover
    from ..config.recording import RecordingOptions


class RecenterCollector(BaseCollector):
    """
    ``shouldRecenter`` mirrors the runtime flag as ``1``/``0`` every tick.
    ``recenterEvent`` is ``1`` only on the first tick where the flag goes from
    0 to 1. The first reading primes the edge detector, so a flag that is
    already set at startup does not fire an event. Ticks where the runtime
    cannot report the flag leave both cells empty.
    """

    collector_name = "RecenterCollector"

    def __init__(self, source: Optional[RecenterSource]) -> None:
        super().__init__()
        self._source = source
        self._should_idx = MISSING
        self._event_idx = MISSING
        self._previous: Optional[int] = None

    def configure(self, registry: ColumnRegistry, options: "RecordingOptions") -> None:
        self._should_idx = index_or_missing(registry, "shouldRecenter")
        self._event_idx = index_or_missing(registry, "recenterEvent")
        enabled = self._source is not None and (self._should_idx >= 0 or self._event_idx >= 0)
        self._mark_configured(enabled)
        self._previous = self._read() if enabled else None

    def _read(self) -> Optional[int]:
        value = self._source.should_recenter()
        if value is None:
            return None
        return 1 if value else 0

    def collect(self, row: RowBuffer, now: float) -> None:
        if not self._enabled:
            return
        current = self._read()
        if current is None:
            return
        pulse = 1 if self._previous == 0 and current == 1 else 0
        set_if_valid(row, self._should_idx, current)
        set_if_valid(row, self._event_idx, pulse)
        self._previous = current
