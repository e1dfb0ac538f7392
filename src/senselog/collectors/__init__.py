"""Per-tick producers that fill the columns they own.

Each collector adapts one data source from :mod:`sources` to the columns of
one stream. :mod:`base` defines the contract and the index helpers they
share.
"""

from .base import MISSING, Collector, first_index, index_or_missing, set_if_valid
from .body import BodyCollector
from .custom_objects import CustomObjectsCollector
from .eyes import EyesCollector
from .face import FaceCollector
from .hands import HandsCollector
from .imu import ImuCollector
from .nodes import NodesCollector
from .performance import PerformanceCollector
from .recenter import RecenterCollector
from .sources import SourceSet

__all__ = [
    "MISSING",
    "BodyCollector",
    "Collector",
    "CustomObjectsCollector",
    "EyesCollector",
    "FaceCollector",
    "HandsCollector",
    "ImuCollector",
    "NodesCollector",
    "PerformanceCollector",
    "RecenterCollector",
    "SourceSet",
    "first_index",
    "index_or_missing",
    "set_if_valid",
]
