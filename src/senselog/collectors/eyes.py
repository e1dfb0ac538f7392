"""Dedicated eye-tracking columns and the application's gaze target."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..core.columns import MISSING, ColumnRegistry
from ..core.row_buffer import RowBuffer
from .base import BaseCollector, any_resolved, index_or_missing, indices, quaternion_to_euler_degrees, set_if_valid, set_many_if_valid
from .sources import EyeGaze, EyeSource, GazeTargetSource

if TYPE_CHECKING:  # pragma: no cover
    from ..config.recording import RecordingOptions


NO_FOCUS = "none"


class EyesCollector(BaseCollector):
    """
    ``{Left,Right}Eye_*`` from the eye source and ``FocusedObject`` /
    ``EyeGazeHitPosition_*`` from the gaze target source.

    Pitch and yaw come from the gaze orientation in degrees ``[0, 360)``.
    Without a focused object the ``FocusedObject`` cell holds :data:`NO_FOCUS`,
    so a gaze sample that hit nothing is distinct from an absent one.
    """

    collector_name = "EyesCollector"

    def __init__(self, eyes: Optional[EyeSource], gaze: Optional[GazeTargetSource] = None) -> None:
        super().__init__()
        self._eyes = eyes
        self._gaze = gaze
        self._write_eyes = False
        self._write_gaze = False
        self._left = (MISSING,) * 4
        self._right = (MISSING,) * 4
        self._eyes_time = MISSING
        self._focused = MISSING
        self._hit = (MISSING,) * 3

    def configure(self, registry: ColumnRegistry, options: "RecordingOptions") -> None:
        # pitch, yaw, valid, confidence
        self._left = (
            index_or_missing(registry, "LeftEye_Pitch"),
            index_or_missing(registry, "LeftEye_Yaw"),
            index_or_missing(registry, "LeftEye_IsValid"),
            index_or_missing(registry, "LeftEye_Confidence"),
        )
        self._right = (
            index_or_missing(registry, "RightEye_Pitch"),
            index_or_missing(registry, "RightEye_Yaw"),
            index_or_missing(registry, "RightEye_IsValid"),
            index_or_missing(registry, "RightEye_Confidence"),
        )
        self._eyes_time = index_or_missing(registry, "Eyes_Time")
        self._focused = index_or_missing(registry, "FocusedObject")
        self._hit = indices(registry, "EyeGazeHitPosition", ("X", "Y", "Z"))

        self._write_eyes = bool(
            options.include_eyes
            and self._eyes is not None
            and any_resolved(self._left + self._right + (self._eyes_time,))
        )
        self._write_gaze = bool(
            options.include_gaze and self._gaze is not None and any_resolved((self._focused,) + self._hit)
        )
        self._mark_configured(self._write_eyes or self._write_gaze)

    def collect(self, row: RowBuffer, now: float) -> None:
        if self._write_eyes:
            state = self._eyes.eye_gazes()
            if state is not None:
                self._write_eye(row, self._right, state.right)
                self._write_eye(row, self._left, state.left)
                set_if_valid(row, self._eyes_time, state.time)

        if self._write_gaze:
            if self._focused >= 0:
                row.set_by_index(self._focused, self._gaze.focused_object_name() or NO_FOCUS)
            set_many_if_valid(row, self._hit, self._gaze.gaze_hit_point())

    @staticmethod
    def _write_eye(row: RowBuffer, cols, gaze: Optional[EyeGaze]) -> None:
        if gaze is None:
            return
        pitch, yaw, _roll = quaternion_to_euler_degrees(gaze.orientation)
        set_many_if_valid(row, cols, (pitch, yaw, 1 if gaze.is_valid else 0, gaze.confidence))
