"""Durable CSV row writer used by every recorded stream and dynamic table."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import IO, Any, Optional, Sequence

from ..core.columns import ColumnRegistry
from ..core.row_buffer import RowBuffer
from ..errors import DestinationUnavailableError, SchemaMismatchError, WriterClosedError
from .formatting import escape_cell, render_cell

logger = logging.getLogger(__name__)

LINE_TERMINATOR = "\n"


class RowWriter:
    """
    Append rows for one registry to one file.

    The header (column names in registry order) is written once, right before
    the first row. Every :meth:`write_row` call flushes the Python buffer and
    fsyncs the descriptor before returning, so a crash loses at most the row
    that was being written. There is no background flush thread.

    Parameters
    ----------
    path:
        Destination file. Parent directories are created.
    delimiter:
        Cell separator, ``","`` by default.
    append:
        Append to an existing file instead of truncating it. When the file
        already has content its header is assumed to be present.
    fsync:
        Call :func:`os.fsync` after every row (default). Disable only for
        throwaway output such as benchmarks.
    """

    def __init__(
        self,
        path: str | Path,
        delimiter: str = ",",
        *,
        append: bool = False,
        encoding: str = "utf-8",
        fsync: bool = True,
    ) -> None:
        if path is None or not str(path).strip():
            raise ValueError("path cannot be empty")
        if not delimiter:
            raise ValueError("delimiter cannot be empty")

        self._path = Path(path)
        self._delimiter = delimiter
        self._fsync = bool(fsync)
        self._registry: Optional[ColumnRegistry] = None
        self._rows_written = 0
        self._closed = False

        existing_content = False
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            if append and self._path.exists():
                existing_content = self._path.stat().st_size > 0
            self._fh: Optional[IO[str]] = self._path.open(
                "a" if append else "w", encoding=encoding, newline=""
            )
        except OSError as exc:
            raise DestinationUnavailableError(
                f"Cannot open {self._path} for writing: {exc}"
            ) from exc

        self._header_written = existing_content
        logger.debug("Opened %s (append=%s)", self._path, append)

    # ------------------------------------------------------------- properties
    @property
    def path(self) -> Path:
        return self._path

    @property
    def delimiter(self) -> str:
        return self._delimiter

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def header_written(self) -> bool:
        return self._header_written

    @property
    def rows_written(self) -> int:
        return self._rows_written

    # ------------------------------------------------------------------ write
    def write_row(
        self,
        registry: ColumnRegistry,
        values: Sequence[Any],
        presence: Sequence[bool],
    ) -> None:
        """
        Write one line with one cell per registry column.

        A cell is left empty when ``presence`` says the column is absent or
        the value is ``None``; otherwise the value is formatted with
        :func:`~senselog.dataio.formatting.render_cell`.
        """
        fh = self._require_open()
        self._bind(registry)

        count = registry.count()
        if len(values) != count or len(presence) != count:
            raise ValueError(
                f"Row has {len(values)} values / {len(presence)} flags "
                f"but the schema has {count} columns"
            )

        if not self._header_written:
            self._write_line(fh, [escape_cell(name, self._delimiter) for name in registry.names])
            self._header_written = True

        delimiter = self._delimiter
        cells = [
            render_cell(values[i], delimiter) if presence[i] else ""
            for i in range(count)
        ]
        self._write_line(fh, cells)
        self._sync(fh)
        self._rows_written += 1

    def write_buffer(self, buffer: RowBuffer) -> None:
        """Write the current contents of ``buffer``."""
        self.write_row(buffer.registry, buffer.values, buffer.presence)

    # ------------------------------------------------------------------ close
    def close(self) -> None:
        """Flush and release the file. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        fh, self._fh = self._fh, None
        if fh is None:
            return
        try:
            fh.flush()
            if self._fsync:
                os.fsync(fh.fileno())
        finally:
            fh.close()
        logger.debug("Closed %s after %d rows", self._path, self._rows_written)

    def __enter__(self) -> "RowWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"RowWriter({str(self._path)!r}, {state}, rows={self._rows_written})"

    # --------------------------------------------------------------- helpers
    def _require_open(self) -> IO[str]:
        if self._closed or self._fh is None:
            raise WriterClosedError(f"Writer for {self._path} is closed")
        return self._fh

    def _bind(self, registry: ColumnRegistry) -> None:
        if registry is None:
            raise ValueError("registry is required")
        if self._registry is None:
            self._registry = registry
            return
        if registry is not self._registry and registry != self._registry:
            raise SchemaMismatchError(
                f"Writer for {self._path} was started with a different column layout"
            )

    def _write_line(self, fh: IO[str], cells: Sequence[str]) -> None:
        fh.write(self._delimiter.join(cells))
        fh.write(LINE_TERMINATOR)

    def _sync(self, fh: IO[str]) -> None:
        fh.flush()
        if self._fsync:
            os.fsync(fh.fileno())
