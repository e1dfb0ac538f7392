from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Tuple

from ..core.columns import ColumnRegistry
from ..core.row_buffer import RowBuffer
from .base import POSITION_AXES, ROTATION_AXES, BaseCollector, any_resolved, indices, set_pose
from .sources import TrackedObject

if TYPE_CHECKING:  # pragma: no cover
    from ..config.recording import RecordingOptions

logger = logging.getLogger(__name__)

_Target = Tuple[TrackedObject, Tuple[int, ...], Tuple[int, ...]]


class CustomObjectsCollector(BaseCollector):
    """Pose of every object registered with ``RecordingOptions.track`` as ``Custom_<name>_*``."""

    collector_name = "CustomObjectsCollector"

    def __init__(self) -> None:
        super().__init__()
        self._targets: List[_Target] = []

    def configure(self, registry: ColumnRegistry, options: "RecordingOptions") -> None:
        self._targets = []
        for obj in options.custom_objects:
            name = getattr(obj, "name", None)
            if not name:
                continue
            prefix = f"Custom_{name}"
            pos = indices(registry, prefix, POSITION_AXES)
            rot = indices(registry, prefix, ROTATION_AXES)
            if not any_resolved(pos + rot):
                logger.warning("Tracked object %r has no columns in the layout", name)
                continue
            self._targets.append((obj, pos, rot))
        self._mark_configured(bool(self._targets))

    def collect(self, row: RowBuffer, now: float) -> None:
        if not self._enabled:
            return
        for obj, pos, rot in self._targets:
            set_pose(row, pos, rot, obj.pose())

    def dispose(self) -> None:
        self._targets.clear()
        super().dispose()
