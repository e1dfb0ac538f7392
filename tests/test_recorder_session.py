import pathlib
import sys
import tempfile
import unittest
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import ClassVar
from unittest import mock

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from senselog.collectors.sources import SourceSet  # noqa: E402
from senselog.config import RecordingOptions, SessionConfig  # noqa: E402
from senselog.core.recorder_session import RecordingSession  # noqa: E402
from senselog.dataio.dynamic_tables import TableRecordMixin, TableRow  # noqa: E402
from senselog.errors import (  # noqa: E402
    DestinationUnavailableError,
    DuplicateColumnError,
    TableFileCollisionError,
    WriterClosedError,
)

STARTED = datetime(2025, 9, 14, 15, 8, tzinfo=timezone.utc)


def _bare_options(**overrides) -> RecordingOptions:
    flags = dict(
        include_nodes=False,
        include_eyes=False,
        include_gaze=False,
        include_hands=False,
        include_body=False,
        include_performance=False,
        include_recenter=False,
    )
    flags.update(overrides)
    return RecordingOptions(**flags)


@dataclass
class ChoiceEvent(TableRecordMixin):
    table_name: ClassVar[str] = "Choice"
    Trial: int
    Outcome: str


class _Latency:
    def __init__(self) -> None:
        self.value = 0.02

    def motion_to_photon_latency(self):
        return self.value


class _Probe:
    def hand_bone_count(self):
        return 3

    def body_joint_count(self):
        return 2


class RecordingSessionTest(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.out = pathlib.Path(self._tmp.name) / "out"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _config(self, **kwargs) -> SessionConfig:
        kwargs.setdefault("recording", _bare_options())
        kwargs.setdefault("fsync", False)
        return SessionConfig(output_dir=self.out, **kwargs)

    def test_files_share_session_stamp_prefix(self):
        session = RecordingSession(self._config(), started_at=STARTED)
        session.close()
        self.assertEqual(session.file_prefix, "2025.09.14_15-08")
        self.assertEqual(session.continuous_path, self.out / "2025.09.14_15-08_ContinuousData.csv")
        self.assertEqual(session.face_path, self.out / "2025.09.14_15-08_FaceExpressionData.csv")
        self.assertTrue(session.continuous_path.exists())
        self.assertTrue(session.face_path.exists())

    def test_empty_prefix_disables_prefix(self):
        with RecordingSession(self._config(file_prefix="", record_face=False)) as session:
            self.assertIsNone(session.file_prefix)
            self.assertEqual(session.continuous_path, self.out / "ContinuousData.csv")
            self.assertIsNone(session.face_path)
        self.assertFalse((self.out / "FaceExpressionData.csv").exists())

    def test_tick_writes_time_and_collected_values(self):
        sources = SourceSet(performance=_Latency())
        cfg = self._config(file_prefix="P01", recording=_bare_options(include_performance=True))
        with RecordingSession(cfg, sources) as session:
            session.tick(0.5)
            sources.performance.value = None
            session.tick(0.52)
            self.assertEqual(session.ticks, 2)

        text = session.continuous_path.read_text(encoding="utf-8")
        self.assertEqual(text, "timeSinceStartup,AppMotionToPhotonLatency\n0.5,0.02\n0.52,\n")
        face_lines = session.face_path.read_text(encoding="utf-8").splitlines()
        self.assertEqual(len(face_lines), 3)
        self.assertTrue(face_lines[0].startswith("timeSinceStartup,Face_Time,Face_Status,Brow_Lowerer_L"))
        self.assertEqual(face_lines[1], "0.5" + "," * 74)

    def test_continuous_layout_follows_probe(self):
        sources = SourceSet(probe=_Probe())
        cfg = self._config(record_face=False, recording=_bare_options(include_hands=True, include_body=True))
        with RecordingSession(cfg, sources) as session:
            schema = session.continuous_schema
            names = schema.registry.names
            self.assertEqual(schema.hand_bone_count, 3)
            self.assertEqual(schema.body_joint_count, 2)
            self.assertFalse(schema.hand_overprovisioned)
            self.assertIn("Right_XRHand_ThumbMetacarpal_qw", names)
            self.assertNotIn("Right_XRHand_ThumbProximal_x", names)
            self.assertIn("Body_Hips_Flags", names)
            self.assertNotIn("Body_SpineLower_Flags", names)

    def test_log_custom_writes_event_tables(self):
        with RecordingSession(self._config(file_prefix="P01", record_face=False)) as session:
            session.log_custom(ChoiceEvent(Trial=1, Outcome="Lose"))
            session.log_custom(lambda: ChoiceEvent(Trial=2, Outcome="Win"))
            session.log_custom(TableRow("Marker", Label="start"))
        self.assertEqual(
            (self.out / "P01_Choice.csv").read_text(encoding="utf-8"),
            "Trial,Outcome\n1,Lose\n2,Win\n",
        )
        self.assertEqual((self.out / "P01_Marker.csv").read_text(encoding="utf-8"), "Label\nstart\n")

    def test_event_table_cannot_overwrite_a_stream_file(self):
        with RecordingSession(self._config(file_prefix="P01", record_face=False)) as session:
            session.tick(0.5)
            with self.assertRaises(TableFileCollisionError):
                session.log_custom(TableRow("ContinuousData", Label="start"))
        self.assertEqual(session.continuous_path.read_text(encoding="utf-8"), "timeSinceStartup\n0.5\n")

    def test_layout_error_leaves_no_files(self):
        cfg = self._config(recording=_bare_options(include_imu=True, imu_sensors=[1, 1]))
        with self.assertRaises(DuplicateColumnError):
            RecordingSession(cfg, started_at=STARTED)
        self.assertFalse(self.out.exists())

    def test_unavailable_face_file_removes_continuous_file(self):
        (self.out / "FaceExpressionData.csv").mkdir(parents=True)
        with self.assertRaises(DestinationUnavailableError):
            RecordingSession(self._config(file_prefix=""))
        self.assertEqual([p.name for p in self.out.iterdir()], ["FaceExpressionData.csv"])

    def test_failed_startup_keeps_existing_file_in_append_mode(self):
        self.out.mkdir(parents=True)
        existing = self.out / "ContinuousData.csv"
        existing.write_text("timeSinceStartup\n0.1\n", encoding="utf-8")
        (self.out / "FaceExpressionData.csv").mkdir()
        with self.assertRaises(DestinationUnavailableError):
            RecordingSession(self._config(file_prefix="", append=True))
        self.assertEqual(existing.read_text(encoding="utf-8"), "timeSinceStartup\n0.1\n")

    def test_tick_and_log_after_close_raise(self):
        session = RecordingSession(self._config(record_face=False))
        session.close()
        session.close()
        self.assertTrue(session.closed)
        with self.assertRaises(WriterClosedError):
            session.tick(1.0)
        factory = mock.Mock()
        with self.assertRaises(WriterClosedError):
            session.log_custom(factory)
        factory.assert_not_called()

    def test_close_disposes_collectors_before_writers(self):
        session = RecordingSession(self._config(record_face=False))
        order = []
        for collector in session.collectors:
            collector.dispose = mock.Mock(side_effect=lambda name=collector.name: order.append(name))
        writer = session._streams[0].writer
        original_close = writer.close

        def _close():
            order.append("writer")
            original_close()

        writer.close = _close
        session.close()
        self.assertEqual(order[-1], "writer")
        self.assertEqual(len(order), len(session.collectors) + 1)

    def test_tick_timing_logged_when_debug_enabled(self):
        with RecordingSession(self._config(record_face=False)) as session:
            with mock.patch.dict("os.environ", {"SENSELOG_DEBUG": "1"}):
                with self.assertLogs("senselog.tools.debug", level="INFO") as logs:
                    session.tick(0.0)
        self.assertIn("[DEBUG] session tick 0 took", logs.output[0])

    def test_close_continues_after_dispose_failure(self):
        session = RecordingSession(self._config(record_face=False))
        session.collectors[0].dispose = mock.Mock(side_effect=RuntimeError("boom"))
        with self.assertLogs("senselog.core.recorder_session", level="ERROR"):
            session.close()
        self.assertTrue(session._streams[0].writer.closed)


if __name__ == "__main__":
    unittest.main()
