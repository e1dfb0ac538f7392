"""
Data source boundary for collectors.

Concrete device SDKs live outside this package. They are adapted to the
small protocols below; every query may return ``None`` when the runtime has
no sample this tick, and collectors then leave their columns empty.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence, Tuple, runtime_checkable

from .skeleton import Hand, TrackedNode

Vector3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]  # x, y, z, w

ZERO3: Vector3 = (0.0, 0.0, 0.0)
IDENTITY: Quaternion = (0.0, 0.0, 0.0, 1.0)


@dataclass(frozen=True)
class Pose:
    position: Vector3 = ZERO3
    orientation: Quaternion = IDENTITY


# ---------------------------------------------------------------------------
# Device nodes
# ---------------------------------------------------------------------------


class NodeStatus(enum.Flag):
    NONE = 0
    Present = enum.auto()
    PositionValid = enum.auto()
    OrientationValid = enum.auto()
    PositionTracked = enum.auto()
    OrientationTracked = enum.auto()


@dataclass(frozen=True)
class NodeState:
    pose: Pose
    status: NodeStatus
    time: float
    velocity: Optional[Vector3] = None
    angular_velocity: Optional[Vector3] = None


class NodeSource(Protocol):
    def node_state(self, node: TrackedNode) -> Optional[NodeState]:  # pragma: no cover - protocol
        ...


# ---------------------------------------------------------------------------
# Eyes and gaze target
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EyeGaze:
    orientation: Quaternion
    is_valid: bool
    confidence: float


@dataclass(frozen=True)
class EyeGazeState:
    left: EyeGaze
    right: EyeGaze
    time: float


class EyeSource(Protocol):
    def eye_gazes(self) -> Optional[EyeGazeState]:  # pragma: no cover - protocol
        ...


class GazeTargetSource(Protocol):
    """Application-side raycast result (what the user is looking at)."""

    def focused_object_name(self) -> Optional[str]:  # pragma: no cover - protocol
        ...

    def gaze_hit_point(self) -> Optional[Vector3]:  # pragma: no cover - protocol
        ...


# ---------------------------------------------------------------------------
# Hands
# ---------------------------------------------------------------------------


class HandStatus(enum.Flag):
    NONE = 0
    HandTracked = enum.auto()
    InputStateValid = enum.auto()
    SystemGestureInProgress = enum.auto()
    DominantHand = enum.auto()
    MenuPressed = enum.auto()


class TrackingConfidence(enum.Enum):
    Low = 0
    High = 1


@dataclass(frozen=True)
class HandState:
    status: HandStatus
    root_pose: Pose
    hand_scale: float
    hand_confidence: TrackingConfidence
    finger_confidences: Sequence[TrackingConfidence] = ()
    requested_time: Optional[float] = None
    sample_time: Optional[float] = None
    bone_poses: Sequence[Pose] = field(default_factory=tuple)


class HandSource(Protocol):
    def hand_state(self, hand: Hand) -> Optional[HandState]:  # pragma: no cover - protocol
        ...


# ---------------------------------------------------------------------------
# Body
# ---------------------------------------------------------------------------


class JointFlags(enum.Flag):
    NONE = 0
    OrientationValid = enum.auto()
    PositionValid = enum.auto()
    OrientationTracked = enum.auto()
    PositionTracked = enum.auto()


class BodyFidelity(enum.Enum):
    Low = 0
    High = 1


class BodyCalibrationStatus(enum.Enum):
    Invalid = 0
    Calibrating = 1
    Valid = 2


@dataclass(frozen=True)
class BodyJointState:
    pose: Pose
    flags: JointFlags


@dataclass(frozen=True)
class BodyState:
    time: float
    confidence: float
    fidelity: BodyFidelity
    calibration_status: BodyCalibrationStatus
    skeleton_changed_count: int
    joints: Sequence[BodyJointState] = field(default_factory=tuple)


class BodySource(Protocol):
    def body_state(self) -> Optional[BodyState]:  # pragma: no cover - protocol
        ...


# ---------------------------------------------------------------------------
# Face
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FaceState:
    time: float
    is_valid: bool
    expression_weights: Sequence[float]
    region_confidences: Sequence[float] = ()


class FaceSource(Protocol):
    def face_state(self) -> Optional[FaceState]:  # pragma: no cover - protocol
        ...


# ---------------------------------------------------------------------------
# Misc runtime signals
# ---------------------------------------------------------------------------


class PerformanceSource(Protocol):
    def motion_to_photon_latency(self) -> Optional[float]:  # pragma: no cover - protocol
        ...


class RecenterSource(Protocol):
    def should_recenter(self) -> Optional[bool]:  # pragma: no cover - protocol
        ...


@runtime_checkable
class TrackedObject(Protocol):
    """Experiment-specific object whose pose goes into ``Custom_<name>_*``."""

    name: str

    def pose(self) -> Optional[Pose]:  # pragma: no cover - protocol
        ...


class CapabilityProbe(Protocol):
    """Optional runtime queries used while sizing the continuous schema."""

    def hand_bone_count(self) -> Optional[int]:  # pragma: no cover - protocol
        ...

    def body_joint_count(self) -> Optional[int]:  # pragma: no cover - protocol
        ...


@dataclass
class SourceSet:
    """Everything a session may sample from; missing sources leave columns empty."""

    nodes: Optional[NodeSource] = None
    eyes: Optional[EyeSource] = None
    gaze: Optional[GazeTargetSource] = None
    hands: Optional[HandSource] = None
    body: Optional[BodySource] = None
    face: Optional[FaceSource] = None
    performance: Optional[PerformanceSource] = None
    recenter: Optional[RecenterSource] = None
    imu: Optional["ImuSampleSource"] = None
    probe: Optional[CapabilityProbe] = None


class ImuSampleSource(Protocol):
    def latest(self, sensor_id: int, max_age_s: Optional[float] = None) -> Optional["ImuReading"]:  # pragma: no cover - protocol
        """Newest reading for ``sensor_id``, or ``None`` if there is none younger than ``max_age_s``."""
        ...


@dataclass(frozen=True)
class ImuReading:
    """Latest MPU6050 sample plus the local monotonic time it arrived.

    Channels the logger was not asked to stream are ``None``.
    """

    t_s: Optional[float]
    ax: Optional[float]
    ay: Optional[float]
    az: Optional[float]
    gx: Optional[float]
    gy: Optional[float]
    gz: Optional[float]
    received_at: float
