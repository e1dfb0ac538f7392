from __future__ import annotations

from typing import Any, Iterator, List, Mapping, Optional, Tuple

from ..errors import ColumnOutOfRangeError, UnknownColumnError
from .columns import ColumnRegistry

CellValue = Any


class RowBuffer:
    """
    Reusable scratch row for one registry.

    Values and presence flags live in two lists that are allocated once and
    overwritten in place by :meth:`clear`, so a 50+ Hz sampling loop never
    grows them. A column that was not set since the last clear is *absent*,
    which is not the same thing as holding ``0`` or ``False``.
    """

    __slots__ = ("_registry", "_values", "_present", "_blank_values", "_blank_present")

    def __init__(self, registry: ColumnRegistry) -> None:
        if registry is None:
            raise ValueError("registry is required")
        count = registry.count()
        self._registry = registry
        self._values: List[CellValue] = [None] * count
        self._present: List[bool] = [False] * count
        self._blank_values: Tuple[None, ...] = (None,) * count
        self._blank_present: Tuple[bool, ...] = (False,) * count

    @property
    def registry(self) -> ColumnRegistry:
        return self._registry

    @property
    def column_count(self) -> int:
        return len(self._values)

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._values)

    # ------------------------------------------------------------------ write
    def set_by_index(self, index: int, value: CellValue) -> None:
        """Fast path used by collectors with cached indices."""
        if index < 0 or index >= len(self._values):
            raise ColumnOutOfRangeError(index, len(self._values))
        self._values[index] = value
        self._present[index] = True

    def set_by_name(self, name: str, value: CellValue) -> None:
        index = self._registry.index_of(name)
        if index is None:
            raise UnknownColumnError(name)
        self._values[index] = value
        self._present[index] = True

    def try_set_by_name(self, name: str, value: CellValue) -> bool:
        """Set ``name`` if the registry has it; never raises for unknown names."""
        index = self._registry.index_of(name)
        if index is None:
            return False
        self._values[index] = value
        self._present[index] = True
        return True

    def set_many(self, assignments: Optional[Mapping[str, CellValue]] = None, **kwargs: CellValue) -> None:
        """Strict bulk set; any unknown name raises to reveal mistakes early."""
        if assignments:
            for name, value in assignments.items():
                self.set_by_name(name, value)
        for name, value in kwargs.items():
            self.set_by_name(name, value)

    def clear(self) -> None:
        """Mark every column absent again without reallocating."""
        self._values[:] = self._blank_values
        self._present[:] = self._blank_present

    # ------------------------------------------------------------------- read
    def is_set(self, index: int) -> bool:
        if index < 0 or index >= len(self._present):
            raise ColumnOutOfRangeError(index, len(self._present))
        return self._present[index]

    def get(self, index: int) -> CellValue:
        """Value at ``index``, or ``None`` when the column is absent."""
        if not self.is_set(index):
            return None
        return self._values[index]

    def get_by_name(self, name: str) -> CellValue:
        index = self._registry.index_of(name)
        if index is None:
            raise UnknownColumnError(name)
        return self.get(index)

    @property
    def values(self) -> List[CellValue]:
        """Live view of the value slots (read by row writers)."""
        return self._values

    @property
    def presence(self) -> List[bool]:
        """Live view of the presence flags (read by row writers)."""
        return self._present

    def set_count(self) -> int:
        return sum(self._present)

    def items(self) -> Iterator[Tuple[str, CellValue]]:
        """Yield ``(name, value)`` for the columns set this cycle."""
        names = self._registry.names
        for i, present in enumerate(self._present):
            if present:
                yield names[i], self._values[i]

    def __repr__(self) -> str:
        return f"RowBuffer({self.set_count()}/{len(self._values)} set)"
