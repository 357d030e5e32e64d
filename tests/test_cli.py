"""Tests for CLI entrypoints."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from gluco_track import cli
from gluco_track.model import TimeWindow

RECORDS = {
    "a": {"glucose": 65, "heartRate": 70, "spo2": 98, "timestamp": "2024-01-01 08:00:00"},
    "b": {"glucose": 120, "heartRate": 80, "spo2": 97, "timestamp": 1_704_189_600_000},
    "c": {"glucose": 190, "heartRate": 105, "spo2": 94, "timestamp": 1_704_193_200_000},
    "bad": {"glucose": "x", "heartRate": 1, "spo2": 1, "timestamp": 1},
}


def _run(db: Path, *args: str) -> int:
    return cli.main(["--db", str(db), *args])


def _import(tmp_path: Path, db: Path) -> None:
    export = tmp_path / "export.json"
    export.write_text(json.dumps(RECORDS), encoding="utf-8")
    assert _run(db, "--user", "u1", "import", str(export)) == 0


def test_parse_args_custom_values() -> None:
    ns = cli.parse_args(["--db", "/tmp/x.sqlite3", "--window", "30", "history", "--page", "2"])
    assert ns.db == "/tmp/x.sqlite3"
    assert ns.window == "30"
    assert ns.command == "history"
    assert ns.page == 2
    assert ns.per_page == 5


def test_import_then_summary(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    db = tmp_path / "app.sqlite3"
    _import(tmp_path, db)
    out = capsys.readouterr().out
    assert "OK: 4 registros importados, 0 omitidos" in out
    assert "OK: 3 lecturas validas en total" in out

    assert _run(db, "--user", "u1", "--window", "all", "summary") == 0
    out = capsys.readouterr().out
    assert "Glucose: 190 mg/dL [High]" in out
    assert "avg 125" in out
    assert "Leafy Greens" in out


def test_import_twice_skips_duplicates(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    db = tmp_path / "app.sqlite3"
    _import(tmp_path, db)
    _import(tmp_path, db)
    assert "OK: 0 registros importados, 4 omitidos" in capsys.readouterr().out


def test_history_pages(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db = tmp_path / "app.sqlite3"
    _import(tmp_path, db)
    capsys.readouterr()
    assert _run(db, "--user", "u1", "--window", "all", "history", "--per-page", "2") == 0
    out = capsys.readouterr().out
    assert "Showing 1 to 2 of 3 results (page 1/2)" in out
    assert "Date & Time" in out


def test_history_empty(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(tmp_path / "app.sqlite3", "--user", "u1", "history") == 0
    assert "No health data recorded yet" in capsys.readouterr().out


def test_missing_user_returns_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert _run(tmp_path / "app.sqlite3", "summary") == 1
    assert "AuthRequiredError" in capsys.readouterr().out


def test_invalid_window_returns_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert _run(tmp_path / "app.sqlite3", "--user", "u1", "--window", "14", "summary") == 2
    assert "Unsupported time window" in capsys.readouterr().out


def test_config_persists_defaults(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    db = tmp_path / "app.sqlite3"
    assert _run(db, "--user", "u1", "--window", "90", "config", "--export-dir", "/out") == 0
    store = cli.SQLiteReadingStore(db)
    config = store.load_config()
    assert config.user_id == "u1"
    assert config.export_dir == "/out"
    assert TimeWindow.parse(config.window_days) is TimeWindow.LAST_90_DAYS

    assert _run(db, "history") == 0
    assert "No health data recorded yet" in capsys.readouterr().out


def test_connect_and_disconnect(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    db = tmp_path / "app.sqlite3"
    assert _run(db, "--user", "u1", "connect", "  ") == 1
    assert "Please enter a valid token" in capsys.readouterr().out

    assert _run(db, "--user", "u1", "connect", "tok") == 0
    store = cli.SQLiteReadingStore(db)
    assert store.load_profile("u1").connection.connected is True
    assert _run(db, "--user", "u1", "disconnect") == 0
    assert store.load_profile("u1").connection.connected is False


def test_ingest_device_payloads(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    db = tmp_path / "app.sqlite3"
    payloads = tmp_path / "device.jsonl"
    payloads.write_text(
        "\n".join(
            [
                '{"status": "calibrating"}',
                '{"glucose": 101, "heartRate": 66, "spo2": 97}',
                "not json",
                "",
                '{"glucose": 150, "heartRate": 90, "spo2": 95}',
            ]
        ),
        encoding="utf-8",
    )
    assert _run(db, "--user", "u1", "ingest", str(payloads)) == 0
    assert "OK: 2 lecturas recibidas del dispositivo" in capsys.readouterr().out
    assert len(cli.SQLiteReadingStore(db).snapshot("u1")) == 2


def test_demo_backfill(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db = tmp_path / "app.sqlite3"
    args = ("--user", "u1", "demo", "--days", "2", "--per-day", "2", "--seed", "1")
    assert _run(db, *args) == 0
    assert "OK: 4 lecturas de demostracion guardadas" in capsys.readouterr().out


def test_export_writes_report(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    db = tmp_path / "app.sqlite3"
    _import(tmp_path, db)
    captured: dict[str, Any] = {}

    def _write_report_xlsx(readings: list, out_path: Path, _: Any) -> None:
        captured["readings"] = readings
        captured["out_path"] = out_path

    class _FixedDatetime(datetime):
        @classmethod
        def now(cls, tz: Any | None = None) -> _FixedDatetime:
            return cls(2025, 12, 31, 23, 59, 1, tzinfo=tz)

    monkeypatch.setattr(cli, "write_report_xlsx", _write_report_xlsx)
    monkeypatch.setattr(cli, "datetime", _FixedDatetime)

    out_dir = tmp_path / "salidas"
    args = ("--user", "u1", "--window", "all", "export", "--out-dir", str(out_dir))
    assert _run(db, *args) == 0
    assert len(captured["readings"]) == 3
    out_path: Path = captured["out_path"]
    assert out_path.parent == out_dir
    assert out_path.name == "gluco_track_reporte_2025-12-31_23-59-01.xlsx"
