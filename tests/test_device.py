from __future__ import annotations

from pathlib import Path

import pytest

from gluco_track.context import ClientContext
from gluco_track.device import (
    CalibrationStatus,
    DeviceLink,
    MeasurementPayload,
    connect_with_token,
    disconnect,
    parse_device_payload,
    realtime_status_message,
)
from gluco_track.errors import AuthRequiredError, DeviceProtocolError, ValidationError
from gluco_track.ingest import readings_from_snapshot
from gluco_track.storage import SQLiteReadingStore


def _context(tmp_path: Path, user_id: str | None = "u1") -> ClientContext:
    ticks = iter(range(10_000, 20_000, 10))
    return ClientContext(
        store=SQLiteReadingStore(tmp_path / "app.sqlite3"),
        user_id=user_id,
        clock=lambda: next(ticks),
    )


def test_parse_device_payload_shapes() -> None:
    assert parse_device_payload(b'{"status": "calibrating"}') == CalibrationStatus(
        "calibrating"
    )
    assert parse_device_payload('{"glucose": 101, "heartRate": 66, "spo2": 97}') == (
        MeasurementPayload(glucose=101, heart_rate=66, spo2=97)
    )


@pytest.mark.parametrize(
    "payload",
    [
        b"\xff\xfe",
        "not json",
        "[1, 2]",
        '{"status": "sleeping"}',
        '{"glucose": 101, "heartRate": 66}',
    ],
)
def test_parse_device_payload_rejects_bad_payloads(payload: bytes | str) -> None:
    with pytest.raises(DeviceProtocolError):
        parse_device_payload(payload)


def test_device_link_stores_measurements(tmp_path: Path) -> None:
    ctx = _context(tmp_path)
    link = DeviceLink(ctx)
    link.connect()
    assert ctx.store.load_profile("u1").connection.connected is True

    assert link.handle_notification('{"status": "calibrating"}') is None
    assert link.calibrating is True
    assert link.status_message(True) == "Device is calibrating... Please wait"

    reading = link.handle_notification('{"glucose": 101, "heartRate": 66, "spo2": 97}')
    assert reading is not None
    assert link.calibrating is False
    assert link.status_message(True) == "Data received successfully"

    assert link.handle_notification("garbage") is None
    stored = readings_from_snapshot(ctx.store.snapshot("u1"))
    assert [(r.glucose, r.timestamp) for r in stored] == [(101, reading.timestamp)]

    link.disconnect()
    assert ctx.store.load_profile("u1").connection.connected is False


def test_device_link_requires_user(tmp_path: Path) -> None:
    link = DeviceLink(_context(tmp_path, user_id=None))
    with pytest.raises(AuthRequiredError):
        link.handle_notification('{"glucose": 1, "heartRate": 1, "spo2": 1}')


def test_connect_with_token_and_disconnect(tmp_path: Path) -> None:
    ctx = _context(tmp_path)
    with pytest.raises(ValidationError, match="valid token"):
        connect_with_token(ctx, "   ")

    profile = connect_with_token(ctx, " abc123 ")
    assert profile.token == "abc123"
    assert profile.connection.connected is True
    assert profile.connection.last_connection is not None

    after = disconnect(ctx)
    assert after.connection.connected is False
    assert after.token == "abc123"


def test_realtime_status_messages() -> None:
    assert realtime_status_message(False, False, False).startswith("Connect your")
    assert realtime_status_message(True, False, False).startswith("Device connected")
