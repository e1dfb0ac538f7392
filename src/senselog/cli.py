"""
Command line entry point.

``senselog record session.yaml --duration 30 --stdin-imu`` records the
continuous stream at the configured rate, optionally filling the IMU columns
from MPU6050 JSON lines piped on stdin::

    ssh pi 'python3 mpu6050_multi_logger.py --stream-stdout' | senselog record cfg.yaml --stdin-imu

``senselog inspect <file.csv>`` prints the header and row count of a table.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from typing import Optional, Sequence

from .collectors.sources import SourceSet
from .config import load_config
from .core.clock import run_fixed_rate
from .core.recorder_session import RecordingSession
from .dataio.log_loader import load_table
from .errors import SenseLogError
from .sensors.imu import start_reader_on_stdin

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="senselog", description="Schema-driven CSV recorder.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("record", help="Record the continuous stream to CSV")
    rec.add_argument("config", nargs="?", default=None, help="Session YAML (defaults when omitted or missing)")
    rec.add_argument("--duration", type=float, default=None, help="Duration in seconds (default: until Ctrl+C)")
    rec.add_argument("--rate", type=float, default=None, help="Tick rate in Hz (overrides sample_rate_hz)")
    rec.add_argument("--out", type=str, default=None, help="Output folder (overrides output_dir)")
    rec.add_argument(
        "--stdin-imu",
        action="store_true",
        help="Read MPU6050 JSON lines from stdin into the Imu<id>_* columns",
    )

    ins = sub.add_parser("inspect", help="Print the header and row count of a recorded table")
    ins.add_argument("path", help="CSV file written by senselog")
    ins.add_argument("--delimiter", type=str, default=",", help="Cell delimiter (default ',')")
    return ap


def _record(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    if args.rate is not None:
        cfg.sample_rate_hz = args.rate
    if args.out:
        cfg.output_dir = args.out
    cfg = cfg.sanitized()

    sources = SourceSet()
    reader = None
    if args.stdin_imu:
        cfg.recording.include_imu = True
        reader = start_reader_on_stdin()
        sources.imu = reader.cache

    stop_event = threading.Event()

    def _handle_signal(signum, frame) -> None:
        logger.info("Signal %d received, stopping", signum)
        stop_event.set()

    previous = {sig: signal.signal(sig, _handle_signal) for sig in (signal.SIGINT, signal.SIGTERM)}

    try:
        with RecordingSession(cfg, sources) as session:
            ticks = run_fixed_rate(
                session.tick,
                cfg.sample_rate_hz,
                duration_s=args.duration,
                stop_event=stop_event,
            )
            print(f"Wrote {ticks} rows to {session.continuous_path}")
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
        if reader is not None:
            reader.stop()
    return 0


def _inspect(args: argparse.Namespace) -> int:
    table = load_table(args.path, delimiter=args.delimiter)
    print(f"{table.path}: {len(table.header)} columns, {len(table)} rows")
    for idx, name in enumerate(table.header):
        print(f"  {idx:4d}  {name}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        if args.command == "record":
            return _record(args)
        return _inspect(args)
    except (SenseLogError, OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
