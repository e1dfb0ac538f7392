"""Fluent construction of column layouts.

The number of columns in a stream is only known once the runtime has been
probed (how many hand bones, which body joints, which face expressions), so
layouts are accumulated here and frozen into a
:class:`~senselog.core.columns.ColumnRegistry` exactly once at startup.
"""

from __future__ import annotations

import enum
from typing import Collection, Iterable, List, Type, Union

from ..errors import DuplicateColumnError, EmptyColumnNameError
from .columns import ColumnRegistry

# Boundary markers that SDK enums carry next to their real members.
DEFAULT_SENTINELS = frozenset({"Invalid", "Max", "Start", "End", "Count"})
DEFAULT_SENTINEL_SUFFIXES = ("_Start", "_End", "_Max", "_MaxSkinnable", "_Count")

EnumerableNames = Union[Type[enum.Enum], Iterable[str]]


def is_sentinel_name(
    name: str,
    sentinels: Collection[str] = DEFAULT_SENTINELS,
    suffixes: tuple[str, ...] = DEFAULT_SENTINEL_SUFFIXES,
) -> bool:
    """Return True for enum markers such as ``Max`` or ``Hand_End``."""
    return name in sentinels or name.endswith(suffixes)


def enumerate_names(
    names: EnumerableNames,
    sentinels: Collection[str] = DEFAULT_SENTINELS,
    suffixes: tuple[str, ...] = DEFAULT_SENTINEL_SUFFIXES,
) -> List[str]:
    """Real member names of an enum class (or name iterable), in declared order."""
    if isinstance(names, type) and issubclass(names, enum.Enum):
        # __members__ keeps aliases, which SDK enums use for their markers
        raw = list(names.__members__.keys())
    else:
        raw = [str(n) for n in names]
    return [n for n in raw if not is_sentinel_name(n, sentinels, suffixes)]


def _join(prefix: str, item: str) -> str:
    if prefix is None or not str(prefix).strip():
        return item
    return f"{prefix}_{item}"


class SchemaBuilder:
    """Accumulate column names, then :meth:`build` a frozen registry."""

    def __init__(self) -> None:
        self._names: List[str] = []

    def add(self, name: str) -> "SchemaBuilder":
        if name is None or not str(name).strip():
            raise EmptyColumnNameError("Column name cannot be empty")
        self._names.append(name)
        return self

    def add_group(self, prefix: str, items: Iterable[str]) -> "SchemaBuilder":
        """
        Add ``{prefix}_{item}`` for each item.

        ``add_group("HeadPos", ["x", "y", "z"])`` gives ``HeadPos_x``,
        ``HeadPos_y``, ``HeadPos_z``. With an empty prefix the items are added
        as-is.
        """
        for item in items:
            if item is None or not str(item).strip():
                raise EmptyColumnNameError(f"Column item name cannot be empty in group {prefix!r}")
            self._names.append(_join(prefix, item))
        return self

    def add_range(
        self,
        prefix: str,
        start_index: int,
        count: int,
        index_width: int = 2,
    ) -> "SchemaBuilder":
        """Add ``count`` zero-padded names: ``Bone_00``, ``Bone_01``, ..."""
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        if index_width < 0:
            raise ValueError(f"index_width must be >= 0, got {index_width}")
        for offset in range(count):
            index = start_index + offset
            self._names.append(_join(prefix, str(index).zfill(index_width)))
        return self

    def add_from_enumerable(
        self,
        prefix: str,
        names: EnumerableNames,
        *,
        sentinels: Collection[str] = DEFAULT_SENTINELS,
        suffixes: tuple[str, ...] = DEFAULT_SENTINEL_SUFFIXES,
    ) -> "SchemaBuilder":
        """
        One column per case of an enumerated set, skipping boundary markers.

        Example::

            class Zone(enum.Enum):
                Lobby = 0
                RoomA = 1
                Max = 2

            builder.add_from_enumerable("TimeInZone", Zone)
            # -> TimeInZone_Lobby, TimeInZone_RoomA
        """
        return self.add_group(prefix, enumerate_names(names, sentinels, suffixes))

    def extend(self, names: Iterable[str]) -> "SchemaBuilder":
        for name in names:
            self.add(name)
        return self

    @property
    def pending(self) -> tuple[str, ...]:
        return tuple(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def build(self) -> ColumnRegistry:
        """Freeze the accumulated names; duplicates or empty names are fatal."""
        registry = ColumnRegistry()
        for name in self._names:
            if name in registry:
                raise DuplicateColumnError(name)
            registry.add(name)
        return registry.freeze()
