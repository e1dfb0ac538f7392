"""Coordinator that owns the schemas, buffers, writers and collectors of one recording."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from ..collectors.base import Collector
from ..collectors.body import BodyCollector
from ..collectors.custom_objects import CustomObjectsCollector
from ..collectors.eyes import EyesCollector
from ..collectors.face import FaceCollector
from ..collectors.hands import HandsCollector
from ..collectors.imu import ImuCollector
from ..collectors.nodes import NodesCollector
from ..collectors.performance import PerformanceCollector
from ..collectors.recenter import RecenterCollector
from ..collectors.sources import SourceSet
from ..config.runtime import SessionConfig
from ..dataio.csv_writer import RowWriter
from ..dataio.dynamic_tables import DynamicTableRegistry, TableRecord
from ..dataio.file_paths import CONTINUOUS_STREAM, FACE_STREAM, session_stamp, stream_path
from ..errors import WriterClosedError
from ..tools.debug import time_block
from .row_buffer import RowBuffer
from .schema_factories import (
    TIME_COLUMN,
    Capabilities,
    ContinuousSchema,
    FaceSchema,
    build_continuous_schema,
    build_face_schema,
    detect_capabilities,
)

logger = logging.getLogger(__name__)

RecordOrFactory = Union[TableRecord, Callable[[], TableRecord]]


class _Stream:
    """One fixed-schema output: a reusable row, its writer, and its collectors."""

    def __init__(
        self,
        name: str,
        buffer: RowBuffer,
        writer: RowWriter,
        collectors: Sequence[Collector],
        *,
        created: bool = True,
    ) -> None:
        self.name = name
        self.buffer = buffer
        self.writer = writer
        self.collectors: List[Collector] = list(collectors)
        # False when appending to a file that was already there
        self.created = created

    def tick(self, now: float) -> None:
        self.buffer.clear()
        self.buffer.try_set_by_name(TIME_COLUMN, now)
        for collector in self.collectors:
            collector.collect(self.buffer, now)
        self.writer.write_buffer(self.buffer)


class RecordingSession:
    """
    Owns everything a recording needs and drives it one tick at a time.

    Construction probes the runtime, builds both layouts and only then opens
    files, so a layout error leaves nothing on disk. If one stream cannot be
    opened, the empty files of the streams opened before it are removed again.
    ``ContinuousData`` gets one row per :meth:`tick`; ``FaceExpressionData``
    too when ``record_face`` is set. Event tables go through :meth:`log_custom` and
    land next to the streams with the same file prefix.

    Use as a context manager, or call :meth:`close` when done.
    """

    def __init__(
        self,
        config: SessionConfig,
        sources: Optional[SourceSet] = None,
        *,
        started_at: Optional[datetime] = None,
    ) -> None:
        self.config = config.sanitized()
        self.sources = sources or SourceSet()
        self.started_at = started_at or datetime.now(timezone.utc)
        prefix = self.config.file_prefix
        self.file_prefix: Optional[str] = session_stamp(self.started_at) if prefix is None else (prefix or None)
        self.output_dir = Path(self.config.output_dir)
        self._closed = False
        self._ticks = 0

        options = self.config.recording
        self.capabilities: Capabilities = detect_capabilities(self.sources.probe)
        self.continuous_schema: ContinuousSchema = build_continuous_schema(options, self.capabilities)
        self.face_schema: Optional[FaceSchema] = (
            build_face_schema(self.capabilities) if self.config.record_face else None
        )
        if self.continuous_schema.hand_overprovisioned or self.continuous_schema.body_overprovisioned:
            logger.warning(
                "Skeleton detection incomplete (hands over-provisioned=%s, body over-provisioned=%s)",
                self.continuous_schema.hand_overprovisioned,
                self.continuous_schema.body_overprovisioned,
            )

        continuous_collectors = self._continuous_collectors()
        face_collectors = self._face_collectors() if self.face_schema is not None else []

        self._streams: List[_Stream] = []
        try:
            self._streams.append(
                self._open_stream(CONTINUOUS_STREAM, self.continuous_schema.registry, continuous_collectors)
            )
            if self.face_schema is not None:
                self._streams.append(self._open_stream(FACE_STREAM, self.face_schema.registry, face_collectors))
        except Exception:
            self._discard_streams()
            raise

        self.tables = DynamicTableRegistry(
            self.output_dir,
            self.config.delimiter,
            self.file_prefix,
            append=self.config.append,
            fsync=self.config.fsync,
        )
        for stream in self._streams:
            self.tables.reserve(stream.writer.path, stream.name)

    # ------------------------------------------------------------------ setup

    def _continuous_collectors(self) -> List[Collector]:
        src = self.sources
        return [
            NodesCollector(src.nodes),
            EyesCollector(src.eyes, src.gaze),
            HandsCollector(src.hands, self.capabilities.hand_bones),
            BodyCollector(src.body, self.capabilities.body_joints),
            RecenterCollector(src.recenter),
            PerformanceCollector(src.performance),
            CustomObjectsCollector(),
            ImuCollector(src.imu),
        ]

    def _face_collectors(self) -> List[Collector]:
        return [
            FaceCollector(
                self.sources.face,
                self.capabilities.face_expressions,
                self.capabilities.face_regions,
            )
        ]

    def _open_stream(self, name: str, registry, collectors: Sequence[Collector]) -> _Stream:
        for collector in collectors:
            collector.configure(registry, self.config.recording)
        path = stream_path(self.output_dir, name, self.file_prefix)
        created = not (self.config.append and path.exists())
        writer = RowWriter(
            path,
            self.config.delimiter,
            append=self.config.append,
            fsync=self.config.fsync,
        )
        logger.info("Recording %s (%d columns) to %s", name, registry.count(), path)
        return _Stream(name, RowBuffer(registry), writer, collectors, created=created)

    def _discard_streams(self) -> None:
        """Close the writers opened so far and remove the empty files they created."""
        for stream in self._streams:
            stream.writer.close()
            if stream.created and stream.writer.rows_written == 0:
                try:
                    stream.writer.path.unlink()
                except OSError:
                    logger.warning("Could not remove %s after failed startup", stream.writer.path, exc_info=True)
        self._streams = []

    # ------------------------------------------------------------------ queries

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def continuous_path(self) -> Path:
        return self._streams[0].writer.path

    @property
    def face_path(self) -> Optional[Path]:
        for stream in self._streams:
            if stream.name == FACE_STREAM:
                return stream.writer.path
        return None

    @property
    def continuous_buffer(self) -> RowBuffer:
        return self._streams[0].buffer

    @property
    def collectors(self) -> List[Collector]:
        return [c for stream in self._streams for c in stream.collectors]

    # ------------------------------------------------------------------ runtime

    def tick(self, now: float) -> None:
        """Sample every collector once and append one row to each stream."""
        if self._closed:
            raise WriterClosedError("Recording session is closed")
        with time_block(f"session tick {self._ticks}"):
            for stream in self._streams:
                stream.tick(now)
        self._ticks += 1

    def log_custom(self, record_or_factory: RecordOrFactory) -> None:
        """Append one event row; factories are called only when the session is open."""
        if self._closed:
            raise WriterClosedError("Recording session is closed")
        record = record_or_factory() if callable(record_or_factory) else record_or_factory
        self.tables.write(record)

    def close(self) -> None:
        """Dispose collectors, then close stream writers and event tables. Idempotent."""
        if self._closed:
            return
        self._closed = True
        for collector in self.collectors:
            try:
                collector.dispose()
            except Exception:
                logger.exception("Failed to dispose collector %s", getattr(collector, "name", collector))
        for stream in self._streams:
            try:
                stream.writer.close()
            except Exception:
                logger.exception("Failed to close %s writer", stream.name)
        try:
            self.tables.close_all()
        except Exception:
            logger.exception("Failed to close event tables")
        logger.info("Recording session closed after %d ticks", self._ticks)

    def __enter__(self) -> "RecordingSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["RecordingSession"]
