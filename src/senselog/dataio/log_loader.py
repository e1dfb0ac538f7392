"""Utilities for loading recorded tables back for inspection or analysis."""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np


@dataclass
class LoadedTable:
    """Header plus raw string cells of one recorded CSV file."""

    path: Path
    header: Tuple[str, ...]
    rows: List[Tuple[str, ...]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def index_of(self, name: str) -> int:
        try:
            return self.header.index(name)
        except ValueError:
            raise KeyError(f"Column {name!r} not in {self.path.name}") from None

    def column(self, name: str) -> List[str]:
        """Raw cells of column ``name``; ``""`` marks an absent value."""
        idx = self.index_of(name)
        return [row[idx] if idx < len(row) else "" for row in self.rows]

    def numeric(self, name: str) -> np.ndarray:
        """
        Column ``name`` as float64, with NaN for empty cells.

        ``true``/``false`` cells become 1.0/0.0; other text raises ``ValueError``.
        """
        out = np.full(len(self.rows), np.nan, dtype=float)
        for i, cell in enumerate(self.column(name)):
            text = cell.strip()
            if not text:
                continue
            lowered = text.lower()
            if lowered == "true":
                out[i] = 1.0
            elif lowered == "false":
                out[i] = 0.0
            else:
                out[i] = float(text)
        return out

    def present_mask(self, name: str) -> np.ndarray:
        return np.array([cell != "" for cell in self.column(name)], dtype=bool)


def load_table(path: str | Path, delimiter: str = ",") -> LoadedTable:
    """
    Load a file written by :class:`~senselog.dataio.csv_writer.RowWriter`.

    The first line is the header. Quoted cells (embedded delimiters, quotes
    or newlines) are unescaped.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8", newline="") as fh:
        reader = csv.reader(fh, delimiter=delimiter)
        try:
            header = tuple(next(reader))
        except StopIteration:
            return LoadedTable(path=path, header=())
        rows = [tuple(row) for row in reader]
    return LoadedTable(path=path, header=header, rows=rows)


def stack_numeric(table: LoadedTable, names: Sequence[str]) -> np.ndarray:
    """Columns ``names`` as an ``(rows, len(names))`` float array."""
    if not names:
        return np.empty((len(table), 0))
    return np.column_stack([table.numeric(name) for name in names])


__all__ = ["LoadedTable", "load_table", "stack_numeric"]
