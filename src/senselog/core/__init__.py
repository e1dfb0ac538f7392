"""Column layouts, per-tick row storage, and the session that drives them.

- :mod:`columns` holds the frozen name -> index map of one table.
- :mod:`schema` accumulates column names and freezes them once.
- :mod:`row_buffer` is the reusable per-tick row with presence tracking.
- :mod:`schema_factories` lays out the ``ContinuousData`` and face streams.
- :mod:`recorder_session` owns writers and collectors for one recording.
- :mod:`clock` runs the fixed-rate tick loop.
"""

from .columns import MISSING, ColumnRegistry
from .row_buffer import RowBuffer
from .schema import SchemaBuilder, enumerate_names, is_sentinel_name

__all__ = [
    "MISSING",
    "ColumnRegistry",
    "RowBuffer",
    "SchemaBuilder",
    "enumerate_names",
    "is_sentinel_name",
]
