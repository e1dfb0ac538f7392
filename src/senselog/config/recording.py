"""Which optional column groups go into the continuous stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional

from ..collectors.sources import TrackedObject


def _coerce_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    return default


def _coerce_int_list(value: Any, default: Iterable[int]) -> List[int]:
    if value is None:
        return list(default)
    if isinstance(value, str):
        value = [part.strip() for part in value.split(",") if part.strip()]
    if not isinstance(value, Iterable):
        return list(default)
    result: List[int] = []
    for item in value:
        try:
            result.append(int(item))
        except (TypeError, ValueError):
            continue
    return result


@dataclass
class RecordingOptions:
    """
    Feature toggles for the continuous stream, one per optional column group.

    Collectors only read these. Live objects to follow (``Custom_<name>_*``
    columns) are registered with :meth:`track` before the session starts;
    ``custom_object_names`` lists names that come from YAML and get bound to
    objects later through :meth:`track`.
    """

    include_nodes: bool = True
    include_eyes: bool = True
    include_gaze: bool = True
    include_hands: bool = True
    include_body: bool = True
    include_performance: bool = True
    include_recenter: bool = True

    # Raspberry Pi MPU6050 loggers (JSON lines)
    include_imu: bool = False
    imu_sensors: List[int] = field(default_factory=lambda: [1])
    imu_max_age_s: float = 0.1

    custom_object_names: List[str] = field(default_factory=list)
    custom_objects: List[TrackedObject] = field(default_factory=list, repr=False)

    def track(self, obj: TrackedObject) -> None:
        """Register a live object whose pose is written every tick."""
        if obj is None:
            raise ValueError("obj cannot be None")
        if any(existing is obj for existing in self.custom_objects):
            return
        self.custom_objects.append(obj)

    def tracked_names(self) -> List[str]:
        """Names of every custom object column group, in registration order."""
        names: List[str] = []
        for obj in self.custom_objects:
            name = getattr(obj, "name", None)
            if name and name not in names:
                names.append(str(name))
        for name in self.custom_object_names:
            if name and name not in names:
                names.append(name)
        return names

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> "RecordingOptions":
        """
        Build options from a ``recording:`` YAML block.

        Supported shape::

            recording:
              include_body: false
              include_imu: true
              imu_sensors: [1, 2]
              custom_objects: [Cup, Target]

        Unknown keys are ignored; unparsable values keep their defaults.
        """
        payload: Mapping[str, Any] = mapping if isinstance(mapping, Mapping) else {}
        defaults = cls()

        def flag(key: str) -> bool:
            return _coerce_bool(payload.get(key), getattr(defaults, key))

        try:
            max_age = float(payload.get("imu_max_age_s", defaults.imu_max_age_s))
        except (TypeError, ValueError):
            max_age = defaults.imu_max_age_s
        if max_age <= 0:
            max_age = defaults.imu_max_age_s

        names_raw = payload.get("custom_objects") or []
        if isinstance(names_raw, str):
            names_raw = [names_raw]
        names = [str(n).strip() for n in names_raw if str(n).strip()]

        return cls(
            include_nodes=flag("include_nodes"),
            include_eyes=flag("include_eyes"),
            include_gaze=flag("include_gaze"),
            include_hands=flag("include_hands"),
            include_body=flag("include_body"),
            include_performance=flag("include_performance"),
            include_recenter=flag("include_recenter"),
            include_imu=flag("include_imu"),
            imu_sensors=_coerce_int_list(payload.get("imu_sensors"), defaults.imu_sensors),
            imu_max_age_s=max_age,
            custom_object_names=names,
        )

    def to_mapping(self) -> dict:
        return {
            "recording": {
                "include_nodes": self.include_nodes,
                "include_eyes": self.include_eyes,
                "include_gaze": self.include_gaze,
                "include_hands": self.include_hands,
                "include_body": self.include_body,
                "include_performance": self.include_performance,
                "include_recenter": self.include_recenter,
                "include_imu": self.include_imu,
                "imu_sensors": list(self.imu_sensors),
                "imu_max_age_s": float(self.imu_max_age_s),
                "custom_objects": self.tracked_names(),
            }
        }
