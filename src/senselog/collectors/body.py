"""Full-body tracking: skeleton metadata and per-joint pose plus flags."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from ..core.columns import MISSING, ColumnRegistry
from ..core.row_buffer import RowBuffer
from .base import POSITION_AXES, ROTATION_AXES, BaseCollector, any_resolved, index_or_missing, indices, set_if_valid, set_many_if_valid, set_pose
from .sources import BodySource

if TYPE_CHECKING:  # pragma: no cover
    from ..config.recording import RecordingOptions

_META_COLUMNS = (
    "Body_Time",
    "Body_Confidence",
    "Body_Fidelity",
    "Body_CalibrationStatus",
    "Body_SkeletonChangedCount",
)

_JointColumns = Tuple[Tuple[int, ...], Tuple[int, ...], int]


class BodyCollector(BaseCollector):
    """Writes ``Body_*`` metadata and ``<joint>_p*/q*/Flags`` for each joint in ``joint_names``."""

    collector_name = "BodyCollector"

    def __init__(self, source: Optional[BodySource], joint_names: Sequence[str] = ()) -> None:
        super().__init__()
        self._source = source
        self._joint_names = tuple(joint_names)
        self._meta: Tuple[int, ...] = (MISSING,) * len(_META_COLUMNS)
        self._joints: List[_JointColumns] = []

    def configure(self, registry: ColumnRegistry, options: "RecordingOptions") -> None:
        self._meta = tuple(index_or_missing(registry, name) for name in _META_COLUMNS)
        self._joints = [
            (
                indices(registry, joint, POSITION_AXES),
                indices(registry, joint, ROTATION_AXES),
                index_or_missing(registry, f"{joint}_Flags"),
            )
            for joint in self._joint_names
        ]
        flat = list(self._meta)
        for pos, rot, flags in self._joints:
            flat.extend(pos)
            flat.extend(rot)
            flat.append(flags)
        self._mark_configured(options.include_body and self._source is not None and any_resolved(flat))

    def collect(self, row: RowBuffer, now: float) -> None:
        if not self._enabled:
            return
        state = self._source.body_state()
        if state is None:
            return
        set_many_if_valid(
            row,
            self._meta,
            (
                state.time,
                state.confidence,
                state.fidelity,
                state.calibration_status,
                state.skeleton_changed_count,
            ),
        )
        # zip stops at the shorter of schema joints and reported joints
        for (pos_idx, rot_idx, flags_idx), joint in zip(self._joints, state.joints):
            set_pose(row, pos_idx, rot_idx, joint.pose)
            set_if_valid(row, flags_idx, joint.flags)

    def dispose(self) -> None:
        self._joints = []
        super().dispose()
