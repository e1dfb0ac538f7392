"""Helpers for constructing output file names."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Characters rejected by Windows, macOS or Linux file systems, plus controls.
_INVALID_FILENAME_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

SESSION_STAMP_FORMAT = "%Y.%m.%d_%H-%M"

CONTINUOUS_STREAM = "ContinuousData"
FACE_STREAM = "FaceExpressionData"


def sanitize_file_name(name: str) -> str:
    """Replace every character that is illegal in a file name with ``_``."""
    return _INVALID_FILENAME_RE.sub("_", name)


def session_stamp(now: Optional[datetime] = None) -> str:
    """
    UTC timestamp shared by every file of one recording session.

    Example: ``"2025.09.14_15-08"``
    """
    moment = now or datetime.now(timezone.utc)
    return moment.strftime(SESSION_STAMP_FORMAT)


def prefixed_file_name(stem: str, prefix: Optional[str] = None, suffix: str = ".csv") -> str:
    """``{prefix}_{stem}{suffix}``, or ``{stem}{suffix}`` without a prefix."""
    safe_stem = sanitize_file_name(stem)
    if prefix is not None and prefix.strip():
        return f"{sanitize_file_name(prefix.strip())}_{safe_stem}{suffix}"
    return f"{safe_stem}{suffix}"


def stream_path(root: Path, stream_name: str, prefix: Optional[str] = None) -> Path:
    """Path of a fixed-schema stream file such as ``ContinuousData``."""
    return Path(root) / prefixed_file_name(stream_name, prefix)
