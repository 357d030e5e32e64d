"""Frontera con el dispositivo: payloads JSON, calibracion y conexion por token."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from gluco_track.context import ClientContext
from gluco_track.errors import DeviceProtocolError, ValidationError
from gluco_track.ingest import parse_reading
from gluco_track.model import Reading, UserProfile

logger = logging.getLogger(__name__)

CALIBRATION_STATES = ("calibrating", "calibrated")


@dataclass(frozen=True)
class CalibrationStatus:
    """``{"status": ...}`` notification."""

    status: str


@dataclass(frozen=True)
class MeasurementPayload:
    """``{glucose, heartRate, spo2}`` notification."""

    glucose: float
    heart_rate: float
    spo2: float


DeviceMessage = CalibrationStatus | MeasurementPayload


def parse_device_payload(data: bytes | str) -> DeviceMessage:
    """Decode one characteristic notification.

    Raises:
        DeviceProtocolError: If the payload is not UTF-8 JSON of a known shape.
    """
    try:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        parsed: Any = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DeviceProtocolError(f"Unreadable payload: {exc}") from exc
    if not isinstance(parsed, dict):
        raise DeviceProtocolError("Payload must be a JSON object")

    if "status" in parsed:
        status = parsed["status"]
        if status not in CALIBRATION_STATES:
            raise DeviceProtocolError(f"Unknown device status: {status!r}")
        return CalibrationStatus(status=status)

    try:
        reading = parse_reading({**parsed, "timestamp": 0})
    except ValidationError as exc:
        raise DeviceProtocolError(f"Incomplete measurement: {exc}") from exc
    return MeasurementPayload(
        glucose=reading.glucose,
        heart_rate=reading.heart_rate,
        spo2=reading.spo2,
    )


class DeviceLink:
    """Consumes notifications from a connected device and stores readings."""

    def __init__(self, context: ClientContext) -> None:
        self._context = context
        self.calibrating = False
        self.last_reading: Reading | None = None

    def connect(self) -> UserProfile:
        """Mark the device as connected in the profile."""
        user_id = self._context.require_user()
        return self._context.store.update_connection(
            user_id, True, self._context.now()
        )

    def disconnect(self) -> UserProfile:
        """Mark the device as disconnected in the profile."""
        user_id = self._context.require_user()
        self.calibrating = False
        return self._context.store.update_connection(
            user_id, False, self._context.now()
        )

    def handle_notification(self, data: bytes | str) -> Reading | None:
        """Process one notification; returns the stored reading, if any.

        Protocol errors are logged and ignored so the stream keeps going.
        Store errors propagate to the caller.
        """
        user_id = self._context.require_user()
        try:
            message = parse_device_payload(data)
        except DeviceProtocolError as exc:
            logger.warning("Ignoring device payload: %s", exc)
            return None

        if isinstance(message, CalibrationStatus):
            self.calibrating = message.status == "calibrating"
            logger.info("Device %s", message.status)
            return None

        now = self._context.now()
        reading = Reading(
            glucose=message.glucose,
            heart_rate=message.heart_rate,
            spo2=message.spo2,
            timestamp=now,
        )
        self._context.store.append(user_id, reading)
        self.calibrating = False
        self.last_reading = reading
        return reading

    def status_message(self, connected: bool) -> str:
        return realtime_status_message(
            connected, self.calibrating, self.last_reading is not None
        )


def connect_with_token(context: ClientContext, token: str) -> UserProfile:
    """Persist ``token`` and treat the device as connected.

    The token is opaque: nothing checks it against the device.

    Raises:
        ValidationError: If the token is blank.
        AuthRequiredError: If no user is signed in.
    """
    clean = token.strip()
    if not clean:
        raise ValidationError("Please enter a valid token")
    user_id = context.require_user()
    profile = context.store.update_connection(
        user_id, True, context.now(), token=clean
    )
    logger.info("Device connected by token for user %s", user_id)
    return profile


def disconnect(context: ClientContext) -> UserProfile:
    """Clear the connected flag, keeping the saved token."""
    user_id = context.require_user()
    return context.store.update_connection(user_id, False, context.now())


def realtime_status_message(connected: bool, calibrating: bool, has_data: bool) -> str:
    if not connected:
        return "Connect your ESP32 device to start monitoring"
    if calibrating:
        return "Device is calibrating... Please wait"
    if has_data:
        return "Data received successfully"
    return "Device connected. Place your finger on the sensor to begin reading"
