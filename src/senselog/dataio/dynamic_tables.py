"""
One CSV file per event record type, with the layout taken from the record.

Researchers declare an event once and log it from anywhere::

    @dataclass
    class ChoiceEvent(TableRecordMixin):
        table_name: ClassVar[str] = "Choice"
        Trial: int
        Outcome: str

    tables = DynamicTableRegistry()
    tables.initialize(output_dir, ",", session_stamp())
    tables.write(ChoiceEvent(Trial=3, Outcome="Win"))   # -> <prefix>_Choice.csv

The first record written under a table name fixes that table's columns.
Every later record for the same name must expose exactly the same field
names in the same order; anything else raises
:class:`~senselog.errors.SchemaConflictError` before a row is written.

Table names are sanitized into file names, so two names can land on one
file (``A/B`` and ``A:B`` both become ``A_B.csv``). The second one raises
:class:`~senselog.errors.TableFileCollisionError` instead of truncating the
first table's file; the same goes for files passed to :meth:`reserve`.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from ..core.columns import ColumnRegistry
from ..core.schema import SchemaBuilder
from ..errors import RegistryNotInitializedError, SchemaConflictError, SchemaError, TableFileCollisionError
from .csv_writer import RowWriter
from .file_paths import prefixed_file_name, sanitize_file_name

logger = logging.getLogger(__name__)

TABLE_NAME_FIELD = "table_name"

FieldPair = Tuple[str, Any]


@runtime_checkable
class TableRecord(Protocol):
    """Anything that can be written to a dynamic table."""

    @property
    def table_name(self) -> str:  # pragma: no cover - protocol
        ...

    def table_fields(self) -> Sequence[FieldPair]:  # pragma: no cover - protocol
        """Ordered ``(column, value)`` pairs, excluding the table name."""
        ...


class TableRecordMixin:
    """
    ``table_fields()`` for dataclasses: every field in declaration order.

    Declare ``table_name`` as a ``ClassVar`` (or as a regular field; it is
    skipped either way).
    """

    def table_fields(self) -> List[FieldPair]:
        if not dataclasses.is_dataclass(self):
            raise TypeError(f"{type(self).__name__} must be a dataclass to use TableRecordMixin")
        return [
            (f.name, getattr(self, f.name))
            for f in dataclasses.fields(self)
            if f.name != TABLE_NAME_FIELD
        ]


class TableRow:
    """Ad-hoc record built from keyword arguments, kept in call order."""

    __slots__ = ("_table_name", "_fields")

    def __init__(self, table_name: str, fields: Optional[Iterable[FieldPair]] = None, **kwargs: Any) -> None:
        self._table_name = table_name
        pairs: List[FieldPair] = list(fields) if fields is not None else []
        pairs.extend(kwargs.items())
        self._fields = tuple(pairs)

    @property
    def table_name(self) -> str:
        return self._table_name

    def table_fields(self) -> Sequence[FieldPair]:
        return self._fields

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v!r}" for k, v in self._fields)
        return f"TableRow({self._table_name!r}, {body})"


def _type_label(record: object) -> str:
    cls = type(record)
    return f"{cls.__module__}.{cls.__qualname__}"


@dataclass
class _OpenTable:
    registry: ColumnRegistry
    writer: RowWriter
    field_names: Tuple[str, ...]
    defining_type: str
    presence: Tuple[bool, ...]


class DynamicTableRegistry:
    """
    Lazily created ``(schema, writer)`` pairs keyed by table name.

    Instances are owned by a :class:`~senselog.core.recorder_session.RecordingSession`
    (or created directly); there is no process-wide state. Writes to the same
    table must not run concurrently; writes to different tables are
    independent.
    """

    def __init__(
        self,
        base_directory: str | Path | None = None,
        delimiter: str = ",",
        file_prefix: Optional[str] = None,
        *,
        append: bool = False,
        fsync: bool = True,
    ) -> None:
        self._base_directory: Optional[Path] = None
        self._delimiter = ","
        self._file_prefix: Optional[str] = None
        self._append = append
        self._fsync = fsync
        self._tables: Dict[str, _OpenTable] = {}
        # file -> name of the open table writing it
        self._owners: Dict[Path, str] = {}
        # files written by someone else, e.g. the session's streams
        self._reserved: Dict[Path, str] = {}
        self._lock = threading.RLock()
        if base_directory is not None:
            self.initialize(base_directory, delimiter, file_prefix)

    # ---------------------------------------------------------------- setup
    def initialize(
        self,
        base_directory: str | Path,
        delimiter: str = ",",
        file_prefix: Optional[str] = None,
    ) -> None:
        """Set the output directory and naming convention for future tables."""
        if base_directory is None or not str(base_directory).strip():
            raise ValueError("base_directory cannot be empty")
        self._base_directory = Path(base_directory)
        if delimiter:
            self._delimiter = delimiter
        if file_prefix is not None and file_prefix.strip():
            self._file_prefix = sanitize_file_name(file_prefix.strip())
        else:
            self._file_prefix = None

    @property
    def initialized(self) -> bool:
        return self._base_directory is not None

    @property
    def base_directory(self) -> Optional[Path]:
        return self._base_directory

    @property
    def file_prefix(self) -> Optional[str]:
        return self._file_prefix

    def path_for(self, table_name: str) -> Path:
        """Where rows for ``table_name`` go (whether or not it is open yet)."""
        if self._base_directory is None:
            raise RegistryNotInitializedError("DynamicTableRegistry.initialize() has not been called")
        return self._base_directory / prefixed_file_name(table_name, self._file_prefix)

    def reserve(self, path: str | Path, owner: str) -> None:
        """Refuse to open any table whose file would be ``path``."""
        with self._lock:
            self._reserved[Path(path)] = owner

    # ---------------------------------------------------------------- write
    def write(self, record: TableRecord) -> None:
        """Append one row for ``record``, opening its table on first use."""
        if record is None:
            raise ValueError("record cannot be None")
        if self._base_directory is None:
            raise RegistryNotInitializedError("DynamicTableRegistry.initialize() has not been called")

        table_name = record.table_name
        if not isinstance(table_name, str) or not table_name.strip():
            raise ValueError(f"{type(record).__name__}.table_name cannot be empty")

        pairs = list(record.table_fields())
        names = tuple(name for name, _ in pairs)
        table = self._table_for(table_name, names, record)

        values = [value for _, value in pairs]
        table.writer.write_row(table.registry, values, table.presence)

    def _table_for(self, table_name: str, names: Tuple[str, ...], record: object) -> _OpenTable:
        with self._lock:
            table = self._tables.get(table_name)
            if table is not None:
                if names != table.field_names:
                    raise SchemaConflictError(
                        table_name,
                        defined_by=table.defining_type,
                        conflicting=_type_label(record),
                        expected=table.field_names,
                        actual=names,
                    )
                return table

            if not names:
                raise SchemaError(
                    f"Record type {_type_label(record)!r} defines no fields other than table_name"
                )
            # Build (and validate) the schema before any file is created.
            registry = SchemaBuilder().extend(names).build()
            path = self.path_for(table_name)
            owner = self._owners.get(path) or self._reserved.get(path)
            if owner is not None:
                raise TableFileCollisionError(table_name, owner, path)
            writer = RowWriter(path, self._delimiter, append=self._append, fsync=self._fsync)
            table = _OpenTable(
                registry=registry,
                writer=writer,
                field_names=names,
                defining_type=_type_label(record),
                presence=(True,) * len(names),
            )
            self._tables[table_name] = table
            self._owners[path] = table_name
            logger.info("Opened dynamic table %r -> %s", table_name, path)
            return table

    # ---------------------------------------------------------------- query
    def table_names(self) -> List[str]:
        with self._lock:
            return list(self._tables.keys())

    def is_open(self, table_name: str) -> bool:
        with self._lock:
            return table_name in self._tables

    def columns(self, table_name: str) -> Optional[Tuple[str, ...]]:
        with self._lock:
            table = self._tables.get(table_name)
            return table.field_names if table is not None else None

    def defining_type(self, table_name: str) -> Optional[str]:
        """Type that first defined ``table_name`` (diagnostics only)."""
        with self._lock:
            table = self._tables.get(table_name)
            return table.defining_type if table is not None else None

    # ---------------------------------------------------------------- close
    def close(self, table_name: str) -> None:
        """Flush and release one table. Unknown names are ignored."""
        if not table_name or not table_name.strip():
            return
        with self._lock:
            table = self._tables.pop(table_name, None)
            if table is not None:
                self._owners.pop(table.writer.path, None)
        if table is not None:
            table.writer.close()

    def close_all(self) -> None:
        """
        Close every open table.

        All tables are attempted; the first failure is re-raised once the
        rest have been closed.
        """
        with self._lock:
            tables = list(self._tables.items())
            self._tables.clear()
            self._owners.clear()
        first_error: Optional[BaseException] = None
        for name, table in tables:
            try:
                table.writer.close()
            except Exception as exc:
                logger.exception("Failed to close dynamic table %r", name)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def __len__(self) -> int:
        with self._lock:
            return len(self._tables)

    def __enter__(self) -> "DynamicTableRegistry":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close_all()
