"""Data input/output helpers (CSV tables and file naming).

Utility modules here keep disk-level concerns isolated from the rest of the
library:
- :mod:`formatting` renders cell values as invariant text.
- :mod:`csv_writer` appends fixed-layout rows durably.
- :mod:`dynamic_tables` keeps one file per event record type.
- :mod:`file_paths` centralises file naming for streams and tables.
- :mod:`log_loader` reads recorded tables back for review.
"""
