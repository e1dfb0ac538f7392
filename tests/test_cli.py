from __future__ import annotations

import re

import yaml

from senselog.cli import build_parser, main


def _write_config(path, out_dir) -> None:
    data = {
        "session": {
            "output_dir": str(out_dir),
            "file_prefix": "",
            "record_face": False,
            "fsync": False,
        },
        "recording": {
            "include_nodes": False,
            "include_eyes": False,
            "include_gaze": False,
            "include_hands": False,
            "include_body": False,
            "include_performance": False,
            "include_recenter": False,
        },
    }
    path.write_text(yaml.safe_dump(data), encoding="utf-8")


def test_parser_requires_command() -> None:
    args = build_parser().parse_args(["record", "cfg.yaml", "--duration", "2", "--rate", "90"])
    assert args.command == "record"
    assert args.duration == 2.0
    assert args.rate == 90.0
    assert not args.stdin_imu


def test_inspect_prints_header(tmp_path, capsys) -> None:
    path = tmp_path / "Choice.csv"
    path.write_text("Trial,Outcome\n1,Win\n2,Lose\n", encoding="utf-8")

    assert main(["inspect", str(path)]) == 0

    out = capsys.readouterr().out
    assert "2 columns, 2 rows" in out
    assert "Outcome" in out


def test_inspect_missing_file_fails(tmp_path) -> None:
    assert main(["inspect", str(tmp_path / "missing.csv")]) == 1


def test_record_writes_continuous_stream(tmp_path, capsys) -> None:
    cfg = tmp_path / "session.yaml"
    out_dir = tmp_path / "out"
    _write_config(cfg, out_dir)

    assert main(["record", str(cfg), "--duration", "0.05", "--rate", "100"]) == 0

    out = capsys.readouterr().out
    match = re.search(r"Wrote (\d+) rows", out)
    assert match is not None
    rows = int(match.group(1))
    assert 1 <= rows <= 5
    lines = (out_dir / "ContinuousData.csv").read_text(encoding="utf-8").splitlines()
    assert lines[0] == "timeSinceStartup"
    assert len(lines) == rows + 1


def test_record_rejects_bad_delimiter(tmp_path) -> None:
    cfg = tmp_path / "session.yaml"
    cfg.write_text('session:\n  delimiter: "\\""\n', encoding="utf-8")
    assert main(["record", str(cfg), "--duration", "0"]) == 1
