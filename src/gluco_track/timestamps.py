"""Normalizacion de timestamps heterogeneos (epoch ms o texto)."""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo

import pandas as pd
from dateutil import parser as date_parser
from dateutil import tz

logger = logging.getLogger(__name__)

_LOCAL_TZ = tz.tzlocal()

# Rango de pandas.Timestamp (ns desde epoch), mas estrecho que el de datetime.
_MIN_MS = pd.Timestamp.min.value // 1_000_000 + 1
_MAX_MS = pd.Timestamp.max.value // 1_000_000


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(datetime.now(tz=_LOCAL_TZ).timestamp() * 1000)


def compare_timestamps(a: object, b: object) -> int:
    """Three-way compare two raw timestamps.

    Numbers compare numerically and strings lexicographically (the
    ``YYYY-MM-DD HH:MM:SS`` format is zero padded, so that is chronological).
    Mixed types fall back to comparing their string forms, which keeps
    sorting total but is not chronologically meaningful.

    Returns:
        -1, 0 or 1, so that sorting descending puts the newest first.
    """
    if _is_number(a) and _is_number(b):
        left: object = a
        right: object = b
    elif isinstance(a, str) and isinstance(b, str):
        left, right = a, b
    else:
        left, right = str(a), str(b)
    return int(left > right) - int(left < right)  # type: ignore[operator]


def parse_timestamp_string(text: str, tzinfo_: tzinfo | None = None) -> int | None:
    """Parse ``"YYYY-MM-DD HH:MM:SS"`` (optionally wrapped in ``*``/``"``).

    Naive values are interpreted in ``tzinfo_`` (local time by default).

    Returns:
        Epoch milliseconds, or None when the text cannot be parsed.
    """
    clean = text.replace("*", "").replace('"', "").strip()
    parts = clean.split(" ")
    if len(parts) != 2:
        return None
    try:
        dt = date_parser.isoparse(f"{parts[0]}T{parts[1]}")
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=tzinfo_ or _LOCAL_TZ)
        return round(dt.timestamp() * 1000)
    except (ValueError, OverflowError, OSError):
        return None


def to_epoch_millis(
    timestamp: object,
    *,
    now_ms: int | None = None,
    tzinfo_: tzinfo | None = None,
) -> int:
    """Convert a raw timestamp to epoch milliseconds.

    Numbers pass through. Strings are parsed with
    :func:`parse_timestamp_string`; anything unparsable counts as "now" so
    it stays visible in every time window.
    """
    if _is_number(timestamp):
        return int(timestamp)  # type: ignore[arg-type]
    if isinstance(timestamp, str):
        parsed = parse_timestamp_string(timestamp, tzinfo_)
        if parsed is not None:
            return parsed
    logger.debug("Unparsable timestamp %r treated as now", timestamp)
    return now_ms if now_ms is not None else now_millis()


def is_representable(ms: int) -> bool:
    """True when epoch ``ms`` fits ``datetime`` and ``pandas.Timestamp``."""
    return _MIN_MS <= ms <= _MAX_MS


def to_datetime(timestamp: object, tzinfo_: tzinfo | None = None) -> datetime:
    """Timezone-aware datetime for a raw timestamp.

    Values outside the ``datetime`` range follow the unparsable policy and
    count as now.
    """
    zone = tzinfo_ or _LOCAL_TZ
    ms = to_epoch_millis(timestamp, tzinfo_=tzinfo_)
    try:
        return datetime.fromtimestamp(ms / 1000, tz=zone)
    except (ValueError, OverflowError, OSError):
        logger.debug("Timestamp %r out of range treated as now", timestamp)
        return datetime.fromtimestamp(now_millis() / 1000, tz=zone)


def format_timestamp(timestamp: object, tzinfo_: tzinfo | None = None) -> str:
    """Format as ``MM/DD/YYYY h:mm AM`` for history tables."""
    dt = to_datetime(timestamp, tzinfo_)
    hour = dt.hour % 12 or 12
    ampm = "PM" if dt.hour >= 12 else "AM"
    return f"{dt:%m/%d/%Y} {hour}:{dt:%M} {ampm}"
