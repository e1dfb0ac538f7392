"""Head pose (legacy Euler block) and per-device node poses."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Tuple

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
    quaternion_to_euler_degrees,
    set_if_valid,
    set_many_if_valid,
    set_pose,
)
from .skeleton import TrackedNode
from .sources import NodeSource, NodeState, NodeStatus

if TYPE_CHECKING:  # pragma: no cover
    from ..config.recording import RecordingOptions

logger = logging.getLogger(__name__)


def _bit(status: NodeStatus, flag: NodeStatus) -> int:
    return 1 if flag in status else 0


@dataclass(frozen=True)
class _NodeColumns:
    present: int
    position: Tuple[int, ...]
    rotation: Tuple[int, ...]
    velocity: Tuple[int, ...]
    angular_velocity: Tuple[int, ...]
    valid_position: int
    valid_orientation: int
    tracked_position: int
    tracked_orientation: int
    time: int

    @classmethod
    def resolve(cls, registry: ColumnRegistry, node: TrackedNode) -> "_NodeColumns":
        base = f"Node_{node.value}"
        return cls(
            present=index_or_missing(registry, f"{base}_Present"),
            position=indices(registry, base, POSITION_AXES),
            rotation=indices(registry, base, ROTATION_AXES),
            velocity=indices(registry, f"{base}_Vel", VECTOR_AXES),
            angular_velocity=indices(registry, f"{base}_AngVel", VECTOR_AXES),
            valid_position=index_or_missing(registry, f"{base}_Valid_Position"),
            valid_orientation=index_or_missing(registry, f"{base}_Valid_Orientation"),
            tracked_position=index_or_missing(registry, f"{base}_Tracked_Position"),
            tracked_orientation=index_or_missing(registry, f"{base}_Tracked_Orientation"),
            time=index_or_missing(registry, f"{base}_Time"),
        )

    def all(self) -> Tuple[int, ...]:
        return (
            self.present,
            *self.position,
            *self.rotation,
            *self.velocity,
            *self.angular_velocity,
            self.valid_position,
            self.valid_orientation,
            self.tracked_position,
            self.tracked_orientation,
            self.time,
        )


class NodesCollector(BaseCollector):
    """
    Writes the ``Head_*``/``Gaze_*`` block and one ``Node_<node>_*`` block per
    :class:`~senselog.collectors.skeleton.TrackedNode`.

    Validity and tracking flags are written as ``1``/``0``. A node the source
    reports nothing for leaves its block empty.
    """

    collector_name = "NodesCollector"

    def __init__(self, source: Optional[NodeSource]) -> None:
        super().__init__()
        self._source = source
        self._head_position: Tuple[int, ...] = ()
        self._head_euler: Tuple[int, ...] = ()
        self._head_flags: Tuple[int, ...] = ()
        self._head_time = -1
        self._nodes: Dict[TrackedNode, _NodeColumns] = {}

    def configure(self, registry: ColumnRegistry, options: "RecordingOptions") -> None:
        self._head_position = (
            index_or_missing(registry, "Head_Position_x"),
            index_or_missing(registry, "Head_Height"),
            index_or_missing(registry, "Head_Position_z"),
        )
        self._head_euler = indices(registry, "Gaze", ("Pitch", "Yaw", "Roll"))
        self._head_flags = (
            index_or_missing(registry, "HeadNodeOrientationValid"),
            index_or_missing(registry, "HeadNodePositionValid"),
            index_or_missing(registry, "HeadNodeOrientationTracked"),
            index_or_missing(registry, "HeadNodePositionTracked"),
        )
        self._head_time = index_or_missing(registry, "HeadNodeTime")

        self._nodes = {}
        for node in TrackedNode:
            cols = _NodeColumns.resolve(registry, node)
            if any_resolved(cols.all()):
                self._nodes[node] = cols

        head_cols = self._head_position + self._head_euler + self._head_flags + (self._head_time,)
        enabled = self._source is not None and (any_resolved(head_cols) or bool(self._nodes))
        self._mark_configured(enabled)

    def collect(self, row: RowBuffer, now: float) -> None:
        if not self._enabled:
            return
        head = self._source.node_state(TrackedNode.Head)
        if head is not None:
            self._write_head(row, head)
        for node, cols in self._nodes.items():
            state = head if node is TrackedNode.Head else self._source.node_state(node)
            if state is not None:
                self._write_node(row, cols, state)

    def _write_head(self, row: RowBuffer, state: NodeState) -> None:
        set_many_if_valid(row, self._head_position, state.pose.position)
        set_many_if_valid(row, self._head_euler, quaternion_to_euler_degrees(state.pose.orientation))
        status = state.status
        set_many_if_valid(
            row,
            self._head_flags,
            (
                _bit(status, NodeStatus.OrientationValid),
                _bit(status, NodeStatus.PositionValid),
                _bit(status, NodeStatus.OrientationTracked),
                _bit(status, NodeStatus.PositionTracked),
            ),
        )
        set_if_valid(row, self._head_time, state.time)

    @staticmethod
    def _write_node(row: RowBuffer, cols: _NodeColumns, state: NodeState) -> None:
        status = state.status
        set_if_valid(row, cols.present, _bit(status, NodeStatus.Present))
        set_pose(row, cols.position, cols.rotation, state.pose)
        set_many_if_valid(row, cols.velocity, state.velocity)
        set_many_if_valid(row, cols.angular_velocity, state.angular_velocity)
        set_if_valid(row, cols.valid_position, _bit(status, NodeStatus.PositionValid))
        set_if_valid(row, cols.valid_orientation, _bit(status, NodeStatus.OrientationValid))
        set_if_valid(row, cols.tracked_position, _bit(status, NodeStatus.PositionTracked))
        set_if_valid(row, cols.tracked_orientation, _bit(status, NodeStatus.OrientationTracked))
        set_if_valid(row, cols.time, state.time)

    def dispose(self) -> None:
        self._nodes.clear()
        super().dispose()
