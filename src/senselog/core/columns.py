"""Ordered, de-duplicated column names with name <-> index lookup."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..errors import (
    ColumnOutOfRangeError,
    DuplicateColumnError,
    EmptyColumnNameError,
    RegistryFrozenError,
)

MISSING = -1


class ColumnRegistry:
    """
    Column names for one logical stream, in file order.

    Registries are grown with :meth:`add` only while they are being built
    (normally by :class:`~senselog.core.schema.SchemaBuilder`) and are frozen
    afterwards, so indices handed out to collectors stay valid for the whole
    session. Names are compared ordinally and case-sensitively.
    """

    __slots__ = ("_names", "_index_of", "_frozen")

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: List[str] = []
        self._index_of: Dict[str, int] = {}
        self._frozen = False
        for name in names:
            self.add(name)

    # ------------------------------------------------------------------ build
    def add(self, name: str) -> int:
        """Append ``name`` and return its index."""
        if self._frozen:
            raise RegistryFrozenError(f"Cannot add column {name!r}: registry is frozen")
        if not isinstance(name, str) or not name.strip():
            raise EmptyColumnNameError("Column name cannot be empty")
        if name in self._index_of:
            raise DuplicateColumnError(name)
        index = len(self._names)
        self._index_of[name] = index
        self._names.append(name)
        return index

    def freeze(self) -> "ColumnRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ----------------------------------------------------------------- lookup
    def index_of(self, name: str) -> Optional[int]:
        """Return the index of ``name`` or ``None`` when it is not a column."""
        return self._index_of.get(name)

    def try_index(self, name: str, default: int = MISSING) -> int:
        """Like :meth:`index_of` but returns ``default`` (``-1``) when absent."""
        return self._index_of.get(name, default)

    def name_at(self, index: int) -> str:
        if index < 0 or index >= len(self._names):
            raise ColumnOutOfRangeError(index, len(self._names))
        return self._names[index]

    def count(self) -> int:
        return len(self._names)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._names)

    # --------------------------------------------------------------- dunders
    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._index_of

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColumnRegistry):
            return NotImplemented
        return self._names == other._names

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        preview = ", ".join(self._names[:4])
        more = ", ..." if len(self._names) > 4 else ""
        return f"ColumnRegistry({len(self._names)} columns: {preview}{more})"
