"""
Canonical exception types for senselog.

Schema errors are raised while streams are being built and abort the session
before any file is opened. Lookup errors signal a collector bug on the strict
``set`` paths. Writer errors surface IO problems to whoever asked for the
write; nothing here retries.
"""

from __future__ import annotations

from pathlib import Path


class SenseLogError(Exception):
    """Base class for every error raised by senselog."""


# ---------------------------------------------------------------------------
# Schema construction / integrity
# ---------------------------------------------------------------------------


class SchemaError(SenseLogError):
    """A column layout could not be built or does not match what was expected."""


class DuplicateColumnError(SchemaError):
    """The same column name was added twice to one registry."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Duplicate column name: {name!r}")
        self.name = name


class EmptyColumnNameError(SchemaError):
    """A column name was empty or whitespace only."""


class RegistryFrozenError(SchemaError):
    """A built registry was asked to grow."""


class SchemaMismatchError(SchemaError):
    """A writer was handed a registry other than the one its header came from."""


class SchemaConflictError(SchemaError):
    """Two record types tried to share one dynamic table with different layouts."""

    def __init__(
        self,
        table_name: str,
        defined_by: str,
        conflicting: str,
        expected: tuple[str, ...],
        actual: tuple[str, ...],
    ) -> None:
        super().__init__(
            f"Table {table_name!r} schema mismatch. First defined by type {defined_by!r} "
            f"with fields {list(expected)}, but type {conflicting!r} has fields {list(actual)}."
        )
        self.table_name = table_name
        self.defined_by = defined_by
        self.conflicting = conflicting
        self.expected = expected
        self.actual = actual


class TableFileCollisionError(SchemaError):
    """Two different names would write to the same file."""

    def __init__(self, table_name: str, owner: str, path: Path) -> None:
        super().__init__(
            f"Table {table_name!r} maps to {path}, which is already used by {owner!r}"
        )
        self.table_name = table_name
        self.owner = owner
        self.path = path


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


class ColumnLookupError(SenseLogError):
    """A column was addressed by a name or index the registry does not have."""


class UnknownColumnError(ColumnLookupError, KeyError):
    """No column with this name exists in the registry."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Column not found in schema: {name!r}")
        self.name = name

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class ColumnOutOfRangeError(ColumnLookupError, IndexError):
    """A column index is outside ``[0, count)``."""

    def __init__(self, index: int, count: int) -> None:
        super().__init__(f"Column index {index} is out of range [0..{count - 1}]")
        self.index = index
        self.count = count


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


class WriterError(SenseLogError):
    """Base class for row writer failures."""


class DestinationUnavailableError(WriterError, OSError):
    """The output file could not be created or opened for writing."""


class WriterClosedError(WriterError):
    """A write was attempted on a writer that has already been closed."""


class RegistryNotInitializedError(SenseLogError):
    """The dynamic table registry was used before ``initialize()``."""


__all__ = [
    "SenseLogError",
    "SchemaError",
    "DuplicateColumnError",
    "EmptyColumnNameError",
    "RegistryFrozenError",
    "SchemaMismatchError",
    "SchemaConflictError",
    "TableFileCollisionError",
    "ColumnLookupError",
    "UnknownColumnError",
    "ColumnOutOfRangeError",
    "WriterError",
    "DestinationUnavailableError",
    "WriterClosedError",
    "RegistryNotInitializedError",
]
