"""Ingesta de snapshots del store: validacion y normalizacion de lecturas."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import tzinfo
from typing import Any

from gluco_track.errors import ValidationError
from gluco_track.model import GLUCOSE, HEART_RATE, SPO2, Reading
from gluco_track.timestamps import is_representable, parse_timestamp_string

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = (GLUCOSE, HEART_RATE, SPO2, "timestamp")


def _coerce_metric(value: Any, name: str) -> float:
    """Return ``value`` as a finite float or raise ValidationError."""
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be numeric, got bool")
    if isinstance(value, int | float):
        try:
            number = float(value)
        except OverflowError as exc:
            raise ValidationError(f"{name} is out of range: {value!r}") from exc
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError as exc:
            raise ValidationError(f"{name} is not numeric: {value!r}") from exc
    else:
        raise ValidationError(f"{name} must be numeric, got {type(value).__name__}")
    if not math.isfinite(number):
        raise ValidationError(f"{name} is not finite: {value!r}")
    return number


def _normalize_timestamp(value: Any, tzinfo_: tzinfo | None) -> int | str:
    """Epoch ms for numbers and parsable strings; other strings stay raw."""
    if isinstance(value, bool):
        raise ValidationError("timestamp must be a number or a string")
    if isinstance(value, int | float):
        if isinstance(value, float) and not math.isfinite(value):
            raise ValidationError(f"timestamp is not finite: {value!r}")
        ms = int(value)
        if not is_representable(ms):
            raise ValidationError(f"timestamp out of range: {value!r}")
        return ms
    if isinstance(value, str) and value.strip():
        parsed = parse_timestamp_string(value, tzinfo_)
        if parsed is None:
            return value
        if not is_representable(parsed):
            raise ValidationError(f"timestamp out of range: {value!r}")
        return parsed
    raise ValidationError(f"Invalid timestamp: {value!r}")


def parse_reading(
    raw: Any,
    key: str | None = None,
    *,
    tzinfo_: tzinfo | None = None,
) -> Reading:
    """Validate one raw store record and build a Reading.

    Args:
        raw: Record as stored, ``{glucose, heartRate, spo2, timestamp}``.
        key: Store key of the record, if any.
        tzinfo_: Zone for naive string timestamps (local by default).

    Raises:
        ValidationError: If the record is not a mapping, misses a field or
            holds a non-numeric metric.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError(f"Reading must be a mapping, got {type(raw).__name__}")
    missing = [name for name in REQUIRED_FIELDS if raw.get(name) is None]
    if missing:
        raise ValidationError(f"Reading misses fields: {', '.join(missing)}")
    return Reading(
        glucose=_coerce_metric(raw[GLUCOSE], GLUCOSE),
        heart_rate=_coerce_metric(raw[HEART_RATE], HEART_RATE),
        spo2=_coerce_metric(raw[SPO2], SPO2),
        timestamp=_normalize_timestamp(raw["timestamp"], tzinfo_),
        key=key,
    )


def _iter_records(snapshot: Any) -> Iterable[tuple[str | None, Any]]:
    if snapshot is None:
        return []
    if isinstance(snapshot, Mapping):
        return ((str(k), v) for k, v in snapshot.items())
    if isinstance(snapshot, list | tuple):
        return ((None, v) for v in snapshot)
    raise ValidationError(f"Unsupported snapshot type: {type(snapshot).__name__}")


def readings_from_snapshot(
    snapshot: Any,
    *,
    tzinfo_: tzinfo | None = None,
) -> list[Reading]:
    """Turn a store snapshot into valid, de-duplicated readings.

    ``snapshot`` is the value delivered by a store change notification: a
    mapping of key -> record, a list of records, or None when the user has
    no readings yet. Malformed records are dropped; exact duplicates (same
    timestamp and metrics under different keys) are kept once. Order of the
    result follows the snapshot; callers sort.
    """
    try:
        records = list(_iter_records(snapshot))
    except ValidationError as exc:
        logger.warning("Ignoring snapshot: %s", exc)
        return []

    out: list[Reading] = []
    seen: set[tuple[object, ...]] = set()
    for key, raw in records:
        try:
            reading = parse_reading(raw, key, tzinfo_=tzinfo_)
        except ValidationError as exc:
            logger.debug("Dropping reading %s: %s", key, exc)
            continue
        fingerprint = (
            reading.timestamp,
            reading.glucose,
            reading.heart_rate,
            reading.spo2,
        )
        if fingerprint in seen:
            continue
        seen.add(fingerprint)
        out.append(reading)
    return out
