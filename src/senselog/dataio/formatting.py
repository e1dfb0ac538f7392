"""Locale-invariant text rendering and CSV escaping for single cells."""

from __future__ import annotations

import datetime as _dt
import enum
import math
from typing import Any

import numpy as np

FLAG_SEPARATOR = "|"
_QUOTE_TRIGGERS = ('"', ",", "\r", "\n")


def _format_float(value: float | np.floating) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    # Shortest round-trip digits for the value's own precision (float32 stays
    # "0.1"), never scientific notation, no trailing ".0"
    return np.format_float_positional(value, trim="-")


def _single_bit(value: int) -> bool:
    return value != 0 and (value & (value - 1)) == 0


def format_flag(value: enum.Flag, separator: str = FLAG_SEPARATOR) -> str:
    """
    Render a composite flag as its active member names.

    ``NodeStatus.Tracked | NodeStatus.OrientationValid`` becomes
    ``Tracked|OrientationValid`` (declaration order). An empty flag renders as
    the name of the zero member when the enum declares one, otherwise ``0``.
    """
    raw = int(value.value)
    if raw == 0:
        for member in type(value).__members__.values():
            if int(member.value) == 0:
                return member.name
        return "0"
    names = []
    covered = 0
    for member in type(value).__members__.values():
        bits = int(member.value)
        if _single_bit(bits) and (raw & bits) == bits and not (covered & bits):
            names.append(member.name)
            covered |= bits
    leftover = raw & ~covered
    if leftover:
        names.append(str(leftover))
    return separator.join(names)


def format_value(value: Any) -> str:
    """Convert one cell value to its file text (without escaping)."""
    if value is None:
        return ""
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, enum.Flag):
        return format_flag(value)
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, np.floating):
        return _format_float(value)
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, (_dt.datetime, _dt.date, _dt.time)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def escape_cell(text: str, delimiter: str = ",") -> str:
    """Quote ``text`` when it contains a quote, delimiter, comma or line break."""
    if not text:
        return ""
    if any(ch in text for ch in _QUOTE_TRIGGERS) or (delimiter and delimiter in text):
        return '"' + text.replace('"', '""') + '"'
    return text


def render_cell(value: Any, delimiter: str = ",") -> str:
    return escape_cell(format_value(value), delimiter)


__all__ = ["FLAG_SEPARATOR", "escape_cell", "format_flag", "format_value", "render_cell"]
