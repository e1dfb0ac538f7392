"""Session configuration loaded from YAML."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

import yaml

from .recording import RecordingOptions, _coerce_bool

DEFAULT_OUTPUT_DIR = Path("data") / "sessions"
DEFAULT_SAMPLE_RATE_HZ = 50.0
OUTPUT_DIR_ENV = "SENSELOG_OUTPUT_DIR"


@dataclass
class SessionConfig:
    """
    Startup inputs for one recording session.

    ``file_prefix`` is shared by every file the session writes. ``None``
    means "use the session start stamp" (``2025.09.14_15-08``); an empty
    string disables the prefix.
    """

    output_dir: Path = DEFAULT_OUTPUT_DIR
    delimiter: str = ","
    file_prefix: Optional[str] = None
    append: bool = False
    fsync: bool = True
    record_face: bool = True
    sample_rate_hz: float = DEFAULT_SAMPLE_RATE_HZ
    recording: RecordingOptions = field(default_factory=RecordingOptions)

    def sanitized(self) -> "SessionConfig":
        """Return a copy with unusable values replaced by defaults."""
        try:
            rate = float(self.sample_rate_hz)
        except (TypeError, ValueError):
            rate = DEFAULT_SAMPLE_RATE_HZ
        if not rate > 0.0:
            rate = DEFAULT_SAMPLE_RATE_HZ
        delimiter = str(self.delimiter or ",")
        if delimiter in {'"', "\r", "\n"}:
            raise ValueError(f"Delimiter {delimiter!r} cannot be used in CSV output")
        return SessionConfig(
            output_dir=Path(self.output_dir).expanduser(),
            delimiter=delimiter,
            file_prefix=self.file_prefix,
            append=bool(self.append),
            fsync=bool(self.fsync),
            record_face=bool(self.record_face),
            sample_rate_hz=rate,
            recording=self.recording,
        )


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten an optional top-level ``session`` key."""
    if "session" in data and isinstance(data["session"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "session":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> SessionConfig:
    """Build :class:`SessionConfig` from ``data`` (ignoring unknown keys)."""
    normalized = _normalize_mapping(data) if data else {}
    defaults = SessionConfig()

    output_dir = normalized.get("output_dir")
    env_dir = os.environ.get(OUTPUT_DIR_ENV)
    if env_dir:
        output_dir = env_dir

    prefix = normalized.get("file_prefix", defaults.file_prefix)
    if prefix is not None:
        prefix = str(prefix)

    cfg = SessionConfig(
        output_dir=Path(str(output_dir)) if output_dir else defaults.output_dir,
        delimiter=str(normalized.get("delimiter") or defaults.delimiter),
        file_prefix=prefix,
        append=_coerce_bool(normalized.get("append"), defaults.append),
        fsync=_coerce_bool(normalized.get("fsync"), defaults.fsync),
        record_face=_coerce_bool(normalized.get("record_face"), defaults.record_face),
        sample_rate_hz=normalized.get("sample_rate_hz", defaults.sample_rate_hz),
        recording=RecordingOptions.from_mapping(normalized.get("recording")),
    )
    return cfg.sanitized()


def load_config(path: str | Path | None) -> SessionConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`SessionConfig`.
    """
    if path is None:
        return config_from_mapping(None)
    cfg_path = Path(path)
    if not cfg_path.exists():
        return config_from_mapping(None)
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


def save_config(path: str | Path, cfg: SessionConfig) -> None:
    """Write ``cfg`` back to YAML (live tracked objects are saved by name)."""
    path = Path(path)
    data = {
        "session": {
            "output_dir": str(cfg.output_dir),
            "delimiter": cfg.delimiter,
            "file_prefix": cfg.file_prefix,
            "append": cfg.append,
            "fsync": cfg.fsync,
            "record_face": cfg.record_face,
            "sample_rate_hz": float(cfg.sample_rate_hz),
        }
    }
    data.update(cfg.recording.to_mapping())
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(data, fh, default_flow_style=False, sort_keys=False)


__all__ = [
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_SAMPLE_RATE_HZ",
    "OUTPUT_DIR_ENV",
    "SessionConfig",
    "config_from_mapping",
    "load_config",
    "save_config",
]
