"""Face expression weights for the ``FaceExpressionData`` stream."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

from ..core.columns import MISSING, ColumnRegistry
from ..core.row_buffer import RowBuffer
from .base import BaseCollector, first_index, index_or_missing, set_if_valid
from .sources import FaceSource

if TYPE_CHECKING:  # pragma: no cover
    from ..config.recording import RecordingOptions

logger = logging.getLogger(__name__)

FALLBACK_EXPRESSION_PREFIX = "Face_Expression"


class FaceCollector(BaseCollector):
    """
    Writes ``Face_Time``, ``Face_Status``, one weight per expression and the
    region confidences.

    Expression columns are looked up by name first. If any name is missing
    from the layout, the collector falls back to numbered columns
    (``Face_Expression_00`` ...) for all of them. Region confidences accept
    both ``FaceRegionConfidence_<region>`` and the older ``RegionConf_<region>``.
    """

    collector_name = "FaceCollector"

    def __init__(
        self,
        source: Optional[FaceSource],
        expression_names: Sequence[str] = (),
        region_names: Sequence[str] = (),
    ) -> None:
        super().__init__()
        self._source = source
        self._expression_names = tuple(expression_names)
        self._region_names = tuple(region_names)
        self._face_time = MISSING
        self._face_status = MISSING
        self._expressions: List[int] = []
        self._regions: List[int] = []
        self._named = True

    @property
    def uses_named_expressions(self) -> bool:
        return self._named

    def configure(self, registry: ColumnRegistry, options: "RecordingOptions") -> None:
        self._face_time = index_or_missing(registry, "Face_Time")
        self._face_status = index_or_missing(registry, "Face_Status")

        named = [index_or_missing(registry, name) for name in self._expression_names]
        self._named = all(idx != MISSING for idx in named)
        if self._named:
            self._expressions = named
        else:
            logger.debug("Expression names not in layout; using %s_NN columns", FALLBACK_EXPRESSION_PREFIX)
            self._expressions = [
                index_or_missing(registry, f"{FALLBACK_EXPRESSION_PREFIX}_{i:02d}")
                for i in range(len(self._expression_names))
            ]

        self._regions = [
            first_index(registry, f"FaceRegionConfidence_{region}", f"RegionConf_{region}")
            for region in self._region_names
        ]
        self._mark_configured(self._source is not None)

    def collect(self, row: RowBuffer, now: float) -> None:
        if not self._enabled:
            return
        state = self._source.face_state()
        if state is None:
            return
        set_if_valid(row, self._face_time, state.time)
        set_if_valid(row, self._face_status, bool(state.is_valid))

        weights = state.expression_weights or ()
        for idx, weight in zip(self._expressions, weights):
            set_if_valid(row, idx, weight)

        confidences = state.region_confidences or ()
        if len(confidences) >= len(self._regions):
            for idx, value in zip(self._regions, confidences):
                set_if_valid(row, idx, value)
