"""senselog: schema-driven CSV recording of tracking and sensor streams.

Typical use::

    from senselog import RecordingSession, load_config, run_fixed_rate

    cfg = load_config("session.yaml")
    with RecordingSession(cfg, sources) as session:
        run_fixed_rate(session.tick, cfg.sample_rate_hz, duration_s=60)
"""

from .config import RecordingOptions, SessionConfig, load_config
from .core.clock import run_fixed_rate
from .core.recorder_session import RecordingSession
from .dataio.dynamic_tables import DynamicTableRegistry, TableRecordMixin, TableRow

__version__ = "0.1.0"

__all__ = [
    "DynamicTableRegistry",
    "RecordingOptions",
    "RecordingSession",
    "SessionConfig",
    "TableRecordMixin",
    "TableRow",
    "__version__",
    "load_config",
    "run_fixed_rate",
]
