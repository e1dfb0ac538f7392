"""
Contract for per-tick collectors and the helpers they share.

The session calls :meth:`Collector.configure` once after the schemas are
built, :meth:`Collector.collect` every tick, and :meth:`Collector.dispose`
at shutdown. Collectors resolve the columns they own in ``configure`` and
cache the indices; a column that the schema does not contain (its group was
switched off) is cached as :data:`MISSING` and silently skipped afterwards.
When a collector's source has no sample for a tick it writes nothing, so the
row shows empty cells rather than stale or zeroed values.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Iterable, Optional, Protocol, Sequence, Tuple

from ..core.columns import MISSING, ColumnRegistry
from ..core.row_buffer import RowBuffer
from .sources import Pose, Quaternion, Vector3

if TYPE_CHECKING:  # pragma: no cover
    from ..config.recording import RecordingOptions

logger = logging.getLogger(__name__)

POSITION_AXES = ("px", "py", "pz")
ROTATION_AXES = ("qx", "qy", "qz", "qw")
VECTOR_AXES = ("x", "y", "z")


class Collector(Protocol):
    """Writes a fixed subset of one stream's columns once per tick."""

    @property
    def name(self) -> str:  # pragma: no cover - protocol
        ...

    def configure(self, registry: ColumnRegistry, options: "RecordingOptions") -> None:  # pragma: no cover - protocol
        ...

    def collect(self, row: RowBuffer, now: float) -> None:  # pragma: no cover - protocol
        ...

    def dispose(self) -> None:  # pragma: no cover - protocol
        ...


# ---------------------------------------------------------------------------
# Index resolution
# ---------------------------------------------------------------------------


def index_or_missing(registry: ColumnRegistry, name: str) -> int:
    return registry.try_index(name, MISSING)


def first_index(registry: ColumnRegistry, *names: str) -> int:
    """Index of the first name the registry knows (for renamed columns)."""
    for name in names:
        idx = registry.try_index(name, MISSING)
        if idx != MISSING:
            return idx
    return MISSING


def indices(registry: ColumnRegistry, prefix: str, axes: Iterable[str]) -> Tuple[int, ...]:
    """Indices of ``{prefix}_{axis}`` for each axis (``MISSING`` where absent)."""
    return tuple(registry.try_index(f"{prefix}_{axis}", MISSING) for axis in axes)


def any_resolved(idx: Iterable[int]) -> bool:
    return any(i != MISSING for i in idx)


# ---------------------------------------------------------------------------
# Guarded writes
# ---------------------------------------------------------------------------


def set_if_valid(row: RowBuffer, index: int, value: Any) -> None:
    """Write ``value`` unless the column was not resolved."""
    if index >= 0:
        row.set_by_index(index, value)


def set_many_if_valid(row: RowBuffer, idx: Sequence[int], values: Optional[Sequence[Any]]) -> None:
    if values is None:
        return
    for index, value in zip(idx, values):
        if index >= 0:
            row.set_by_index(index, value)


def set_known_values(row: RowBuffer, idx: Sequence[int], values: Sequence[Optional[Any]]) -> None:
    """Like :func:`set_many_if_valid`, but a ``None`` value leaves its column absent."""
    for index, value in zip(idx, values):
        if index >= 0 and value is not None:
            row.set_by_index(index, value)


def set_pose(row: RowBuffer, pos_idx: Sequence[int], rot_idx: Sequence[int], pose: Optional[Pose]) -> None:
    if pose is None:
        return
    set_many_if_valid(row, pos_idx, pose.position)
    set_many_if_valid(row, rot_idx, pose.orientation)


# ---------------------------------------------------------------------------
# Rotation helpers
# ---------------------------------------------------------------------------


def quaternion_to_euler_degrees(q: Quaternion) -> Vector3:
    """
    Convert ``(x, y, z, w)`` into ``(pitch, yaw, roll)`` in degrees, each in ``[0, 360)``.

    Angles follow the left-handed engine convention: rotation about X
    (pitch), then Y (yaw), then Z (roll), applied as Z-X-Y.
    """
    x, y, z, w = (float(c) for c in q)
    norm = math.sqrt(x * x + y * y + z * z + w * w)
    if norm == 0.0:
        return (0.0, 0.0, 0.0)
    x, y, z, w = x / norm, y / norm, z / norm, w / norm

    sin_pitch = 2.0 * (w * x - y * z)
    sin_pitch = max(-1.0, min(1.0, sin_pitch))
    pitch = math.asin(sin_pitch)
    if abs(sin_pitch) < 0.9999:
        yaw = math.atan2(2.0 * (w * y + x * z), 1.0 - 2.0 * (x * x + y * y))
        roll = math.atan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (x * x + z * z))
    else:
        # Gimbal lock: fold roll into yaw
        yaw = math.atan2(2.0 * (x * z - w * y), 1.0 - 2.0 * (y * y + z * z))
        roll = 0.0

    return tuple(math.degrees(a) % 360.0 for a in (pitch, yaw, roll))  # type: ignore[return-value]


class BaseCollector:
    """Shared plumbing: name, enabled flag, and a no-op dispose."""

    collector_name = "Collector"

    def __init__(self) -> None:
        self._enabled = False
        self._configured = False

    @property
    def name(self) -> str:
        return self.collector_name

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def configured(self) -> bool:
        return self._configured

    def _mark_configured(self, enabled: bool) -> None:
        self._enabled = bool(enabled)
        self._configured = True
        if not self._enabled:
            logger.debug("%s has no columns to write; it will stay idle", self.collector_name)

    def dispose(self) -> None:
        self._enabled = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(enabled={self._enabled})"
