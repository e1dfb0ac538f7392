"""
Column layouts for the two fixed streams.

``ContinuousData`` carries one row per tick for head, eyes, device nodes,
hands, body and whatever else :class:`~senselog.config.RecordingOptions`
switches on. ``FaceExpressionData`` carries the face expression weights.
The number of hand bones and body joints depends on the runtime, so the
layouts are built from :class:`Capabilities` probed once at startup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

from ..collectors.skeleton import FINGERS, IMU_CHANNELS, BodyJoint, FaceExpression, FaceRegion, Hand, TrackedNode, XRHandBone
from .columns import ColumnRegistry
from .schema import SchemaBuilder, enumerate_names

if TYPE_CHECKING:  # pragma: no cover
    from ..collectors.sources import CapabilityProbe
    from ..config.recording import RecordingOptions

logger = logging.getLogger(__name__)

TIME_COLUMN = "timeSinceStartup"

POSITION = ("px", "py", "pz")
ROTATION = ("qx", "qy", "qz", "qw")
VECTOR = ("x", "y", "z")

HAND_BONE_PREFIX = "XRHand_"
BODY_JOINT_PREFIX = "Body_"


@dataclass(frozen=True)
class Capabilities:
    """What the runtime reports, plus whether each probe actually answered."""

    hand_bones: Tuple[str, ...]
    body_joints: Tuple[str, ...]
    face_expressions: Tuple[str, ...]
    face_regions: Tuple[str, ...]
    hand_detection_ok: bool = True
    body_detection_ok: bool = True

    @property
    def hand_bone_count(self) -> int:
        return len(self.hand_bones)

    @property
    def body_joint_count(self) -> int:
        return len(self.body_joints)


def hand_bone_names() -> Tuple[str, ...]:
    return tuple(n for n in enumerate_names(XRHandBone) if n.startswith(HAND_BONE_PREFIX))


def body_joint_names() -> Tuple[str, ...]:
    return tuple(n for n in enumerate_names(BodyJoint) if n.startswith(BODY_JOINT_PREFIX))


def face_expression_names() -> Tuple[str, ...]:
    return tuple(enumerate_names(FaceExpression))


def face_region_names() -> Tuple[str, ...]:
    return tuple(enumerate_names(FaceRegion))


def _probe_count(probe: Optional["CapabilityProbe"], method: str) -> Optional[int]:
    query = getattr(probe, method, None) if probe is not None else None
    if query is None:
        return None
    try:
        count = query()
    except Exception:  # noqa: BLE001 - probe failures fall back to full layout
        logger.warning("Capability probe %s failed", method, exc_info=True)
        return None
    if count is None:
        return None
    try:
        count = int(count)
    except (TypeError, ValueError):
        logger.warning("Capability probe %s returned non-integer %r", method, count)
        return None
    return count if count > 0 else None


def _sized(names: Sequence[str], count: Optional[int], what: str) -> Tuple[Tuple[str, ...], bool]:
    if count is None:
        logger.warning("%s count not detected, defaulting to %d column groups (may over-provision)", what, len(names))
        return tuple(names), False
    if count > len(names):
        logger.error("%s count mismatch. Detected count: %d, names count: %d", what, count, len(names))
        return tuple(names), True
    return tuple(names[:count]), True


def detect_capabilities(probe: Optional["CapabilityProbe"] = None) -> Capabilities:
    """
    Ask ``probe`` how many hand bones and body joints the runtime tracks.

    A probe that is missing, raises, or answers ``None`` leaves the full
    enumerated layout in place and marks that detection as failed.
    """
    hands, hand_ok = _sized(hand_bone_names(), _probe_count(probe, "hand_bone_count"), "Hand bone")
    body, body_ok = _sized(body_joint_names(), _probe_count(probe, "body_joint_count"), "Body joint")
    return Capabilities(
        hand_bones=hands,
        body_joints=body,
        face_expressions=face_expression_names(),
        face_regions=face_region_names(),
        hand_detection_ok=hand_ok,
        body_detection_ok=body_ok,
    )


@dataclass(frozen=True)
class ContinuousSchema:
    registry: ColumnRegistry
    hand_bone_count: int
    hand_overprovisioned: bool
    body_joint_count: int
    body_overprovisioned: bool


@dataclass(frozen=True)
class FaceSchema:
    registry: ColumnRegistry
    expression_count: int
    region_count: int


def _add_pose(builder: SchemaBuilder, prefix: str, position_axes: Sequence[str] = POSITION) -> None:
    builder.add_group(prefix, position_axes)
    builder.add_group(prefix, ROTATION)


def build_continuous_schema(options: "RecordingOptions", capabilities: Capabilities) -> ContinuousSchema:
    """Lay out the ``ContinuousData`` stream for ``options``."""
    builder = SchemaBuilder()
    builder.add(TIME_COLUMN)

    if options.include_nodes:
        builder.add("Head_Position_x")
        builder.add("Head_Height")
        builder.add("Head_Position_z")
        builder.add_group("Gaze", ("Pitch", "Yaw", "Roll"))
        builder.add("HeadNodeOrientationValid")
        builder.add("HeadNodePositionValid")
        builder.add("HeadNodeOrientationTracked")
        builder.add("HeadNodePositionTracked")
        builder.add("HeadNodeTime")

    if options.include_gaze:
        builder.add("FocusedObject")
        builder.add_group("EyeGazeHitPosition", ("X", "Y", "Z"))

    if options.include_eyes:
        builder.extend(
            (
                "RightEye_Pitch",
                "RightEye_Yaw",
                "LeftEye_Pitch",
                "LeftEye_Yaw",
                "LeftEye_IsValid",
                "LeftEye_Confidence",
                "RightEye_IsValid",
                "RightEye_Confidence",
                "Eyes_Time",
            )
        )

    if options.include_recenter:
        builder.add("shouldRecenter")
        builder.add("recenterEvent")

    if options.include_nodes:
        for node in TrackedNode:
            base = f"Node_{node.value}"
            builder.add(f"{base}_Present")
            _add_pose(builder, base)
            builder.add_group(f"{base}_Vel", VECTOR)
            builder.add_group(f"{base}_AngVel", VECTOR)
            builder.add(f"{base}_Valid_Position")
            builder.add(f"{base}_Valid_Orientation")
            builder.add(f"{base}_Tracked_Position")
            builder.add(f"{base}_Tracked_Orientation")
            builder.add(f"{base}_Time")

    if options.include_hands:
        for hand in Hand:
            side = hand.value
            builder.add(f"{side}Hand_Status")
            _add_pose(builder, f"{side}Hand_Root")
            builder.add(f"{side}Hand_HandScale")
            builder.add(f"{side}Hand_HandConfidence")
            builder.add_group(f"{side}Hand_FingerConf", FINGERS)
            builder.add(f"{side}Hand_RequestedTS")
            builder.add(f"{side}Hand_SampleTS")
            for bone in capabilities.hand_bones:
                _add_pose(builder, f"{side}_{bone}", VECTOR)

    if options.include_body:
        builder.extend(
            (
                "Body_Time",
                "Body_Confidence",
                "Body_Fidelity",
                "Body_CalibrationStatus",
                "Body_SkeletonChangedCount",
            )
        )
        for joint in capabilities.body_joints:
            _add_pose(builder, joint)
            builder.add(f"{joint}_Flags")

    if options.include_performance:
        builder.add("AppMotionToPhotonLatency")

    if options.include_imu:
        for sensor_id in options.imu_sensors:
            builder.add_group(f"Imu{sensor_id}", IMU_CHANNELS)

    for name in options.tracked_names():
        _add_pose(builder, f"Custom_{name}")

    registry = builder.build()
    logger.debug("Continuous schema has %d columns", registry.count())
    return ContinuousSchema(
        registry=registry,
        hand_bone_count=capabilities.hand_bone_count if options.include_hands else 0,
        hand_overprovisioned=not capabilities.hand_detection_ok,
        body_joint_count=capabilities.body_joint_count if options.include_body else 0,
        body_overprovisioned=not capabilities.body_detection_ok,
    )


def build_face_schema(capabilities: Capabilities) -> FaceSchema:
    """Lay out the ``FaceExpressionData`` stream: timing, status, weights, region confidences."""
    builder = SchemaBuilder()
    builder.add(TIME_COLUMN)
    builder.add("Face_Time")
    builder.add("Face_Status")
    builder.add_group("", capabilities.face_expressions)
    builder.add_group("FaceRegionConfidence", capabilities.face_regions)
    return FaceSchema(
        registry=builder.build(),
        expression_count=len(capabilities.face_expressions),
        region_count=len(capabilities.face_regions),
    )


__all__ = [
    "Capabilities",
    "ContinuousSchema",
    "FaceSchema",
    "IMU_CHANNELS",
    "TIME_COLUMN",
    "body_joint_names",
    "build_continuous_schema",
    "build_face_schema",
    "detect_capabilities",
    "face_expression_names",
    "face_region_names",
    "hand_bone_names",
]
