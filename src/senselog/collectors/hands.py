"""Hand tracking: status, root pose, confidences and per-bone poses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Sequence, Tuple

from ..core.columns import ColumnRegistry
from ..core.row_buffer import RowBuffer
from .base import (
    POSITION_AXES,
    ROTATION_AXES,
    VECTOR_AXES,
    BaseCollector,
    any_resolved,
    index_or_missing,
    indices,
    set_if_valid,
    set_many_if_valid,
    set_pose,
)
from .skeleton import FINGERS, Hand
from .sources import HandSource, HandState

if TYPE_CHECKING:  # pragma: no cover
    from ..config.recording import RecordingOptions


@dataclass(frozen=True)
class _HandColumns:
    status: int
    root_position: Tuple[int, ...]
    root_rotation: Tuple[int, ...]
    scale: int
    confidence: int
    fingers: Tuple[int, ...]
    requested_ts: int
    sample_ts: int
    bones: Tuple[Tuple[Tuple[int, ...], Tuple[int, ...]], ...]

    def all(self) -> Tuple[int, ...]:
        flat = [self.status, *self.root_position, *self.root_rotation, self.scale, self.confidence]
        flat.extend(self.fingers)
        flat.extend((self.requested_ts, self.sample_ts))
        for pos, rot in self.bones:
            flat.extend(pos)
            flat.extend(rot)
        return tuple(flat)


def _resolve(registry: ColumnRegistry, hand: Hand, bone_names: Sequence[str]) -> _HandColumns:
    side = hand.value
    prefix = f"{side}Hand"
    return _HandColumns(
        status=index_or_missing(registry, f"{prefix}_Status"),
        root_position=indices(registry, f"{prefix}_Root", POSITION_AXES),
        root_rotation=indices(registry, f"{prefix}_Root", ROTATION_AXES),
        scale=index_or_missing(registry, f"{prefix}_HandScale"),
        confidence=index_or_missing(registry, f"{prefix}_HandConfidence"),
        fingers=indices(registry, f"{prefix}_FingerConf", FINGERS),
        requested_ts=index_or_missing(registry, f"{prefix}_RequestedTS"),
        sample_ts=index_or_missing(registry, f"{prefix}_SampleTS"),
        bones=tuple(
            (
                indices(registry, f"{side}_{bone}", VECTOR_AXES),
                indices(registry, f"{side}_{bone}", ROTATION_AXES),
            )
            for bone in bone_names
        ),
    )


class HandsCollector(BaseCollector):
    """
    Writes ``{Left,Right}Hand_*`` and ``{Left,Right}_<bone>_*``.

    ``bone_names`` must be the same list the continuous layout was built from
    (``Capabilities.hand_bones``). The status cell holds the
    :class:`~senselog.collectors.sources.HandStatus` flag label, confidences
    hold the ``TrackingConfidence`` name. Bones beyond the reported count stay
    empty.
    """

    collector_name = "HandsCollector"

    def __init__(self, source: Optional[HandSource], bone_names: Sequence[str] = ()) -> None:
        super().__init__()
        self._source = source
        self._bone_names = tuple(bone_names)
        self._hands: Dict[Hand, _HandColumns] = {}

    def configure(self, registry: ColumnRegistry, options: "RecordingOptions") -> None:
        self._hands = {}
        if options.include_hands and self._source is not None:
            for hand in Hand:
                cols = _resolve(registry, hand, self._bone_names)
                if any_resolved(cols.all()):
                    self._hands[hand] = cols
        self._mark_configured(bool(self._hands))

    def collect(self, row: RowBuffer, now: float) -> None:
        if not self._enabled:
            return
        for hand, cols in self._hands.items():
            state = self._source.hand_state(hand)
            if state is not None:
                self._write_hand(row, cols, state)

    @staticmethod
    def _write_hand(row: RowBuffer, cols: _HandColumns, state: HandState) -> None:
        set_if_valid(row, cols.status, state.status)
        set_pose(row, cols.root_position, cols.root_rotation, state.root_pose)
        set_if_valid(row, cols.scale, state.hand_scale)
        set_if_valid(row, cols.confidence, state.hand_confidence)
        if state.finger_confidences and len(state.finger_confidences) >= len(FINGERS):
            set_many_if_valid(row, cols.fingers, state.finger_confidences)
        if state.requested_time is not None:
            set_if_valid(row, cols.requested_ts, state.requested_time)
        if state.sample_time is not None:
            set_if_valid(row, cols.sample_ts, state.sample_time)
        for (pos_idx, rot_idx), pose in zip(cols.bones, state.bone_poses):
            set_pose(row, pos_idx, rot_idx, pose)

    def dispose(self) -> None:
        self._hands.clear()
        super().dispose()
