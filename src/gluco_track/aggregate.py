"""Agregacion de lecturas: orden, ultima lectura, ventanas y estadisticas."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import tzinfo
from functools import cmp_to_key

import pandas as pd

from gluco_track.model import (
    DAY_MS,
    GLUCOSE,
    HEART_RATE,
    METRICS,
    MetricStatistics,
    Reading,
    TimeWindow,
)
from gluco_track.status import classify
from gluco_track.timestamps import (
    compare_timestamps,
    format_timestamp,
    now_millis,
    to_datetime,
    to_epoch_millis,
)

# Metricas enteras: el promedio se muestra redondeado.
_ROUNDED_METRICS = frozenset({GLUCOSE, HEART_RATE})

FRAME_COLUMNS = [
    "key",
    "timestamp_ms",
    "datetime",
    "date",
    "glucose",
    "heart_rate",
    "spo2",
    "glucose_status",
]


def _by_timestamp(a: Reading, b: Reading) -> int:
    return compare_timestamps(a.timestamp, b.timestamp)


def sort_descending(readings: Sequence[Reading]) -> list[Reading]:
    """Newest first. Stable: ties keep their original order."""
    return sorted(readings, key=cmp_to_key(_by_timestamp), reverse=True)


def latest(readings: Sequence[Reading]) -> Reading | None:
    """Most recent reading, or None for an empty collection."""
    if not readings:
        return None
    return sort_descending(readings)[0]


def filter_by_window(
    readings: Sequence[Reading],
    window: TimeWindow,
    now_ms: int | None = None,
) -> list[Reading]:
    """Keep readings inside ``window``, counted back from ``now_ms``.

    Order is preserved. Unparsable timestamps count as "now" and are kept.
    """
    if window is TimeWindow.ALL_TIME:
        return list(readings)
    now = now_ms if now_ms is not None else now_millis()
    cutoff = now - window.days * DAY_MS
    return [
        r for r in readings if to_epoch_millis(r.timestamp, now_ms=now) >= cutoff
    ]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def statistics(readings: Sequence[Reading], metric: str) -> MetricStatistics:
    """Average/min/max/current of ``metric`` over ``readings``.

    Glucose and heart rate averages are rounded to the nearest integer
    (halves round up); SpO2 keeps full precision. An empty collection gives
    all zeros for any metric name.

    Raises:
        ValueError: If ``metric`` is not a known metric name and there is
            something to aggregate.
    """
    if not readings:
        return MetricStatistics()
    if metric not in METRICS:
        raise ValueError(f"Unknown metric: {metric}")

    values = [r.value(metric) for r in readings]
    mean = sum(values) / len(values)
    newest = latest(readings)
    return MetricStatistics(
        average=_round_half_up(mean) if metric in _ROUNDED_METRICS else mean,
        minimum=min(values),
        maximum=max(values),
        current=newest.value(metric) if newest is not None else 0,
    )


def summarize(readings: Sequence[Reading]) -> dict[str, MetricStatistics]:
    """Statistics for every metric."""
    return {metric: statistics(readings, metric) for metric in METRICS}


def date_range_display(
    readings: Sequence[Reading], tzinfo_: tzinfo | None = None
) -> str:
    """``"first - last"`` span of the collection, or ``"No data"``."""
    if not readings:
        return "No data"
    ordered = sort_descending(readings)
    first = format_timestamp(ordered[-1].timestamp, tzinfo_)
    last = format_timestamp(ordered[0].timestamp, tzinfo_)
    return f"{first} - {last}"


def readings_to_frame(
    readings: Sequence[Reading], tzinfo_: tzinfo | None = None
) -> pd.DataFrame:
    """Convert readings to a DataFrame sorted oldest first (chart order)."""
    rows = []
    for r in reversed(sort_descending(readings)):
        dt = to_datetime(r.timestamp, tzinfo_)
        rows.append(
            {
                "key": r.key,
                "timestamp_ms": to_epoch_millis(r.timestamp, tzinfo_=tzinfo_),
                "datetime": dt,
                "date": dt.date(),
                "glucose": r.glucose,
                "heart_rate": r.heart_rate,
                "spo2": r.spo2,
                "glucose_status": classify(GLUCOSE, r.glucose).label,
            }
        )
    if not rows:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    return pd.DataFrame(rows, columns=FRAME_COLUMNS).reset_index(drop=True)


def daily_summary(frame: pd.DataFrame) -> pd.DataFrame:
    """Aggregate a readings frame by day (count/min/max/avg per metric)."""
    columns = ["date", "count"] + [
        f"{metric}_{agg}"
        for metric in ("glucose", "heart_rate", "spo2")
        for agg in ("min", "max", "avg")
    ]
    if frame.empty:
        return pd.DataFrame(columns=columns)
    g = frame.groupby("date", as_index=False).agg(
        count=("glucose", "count"),
        glucose_min=("glucose", "min"),
        glucose_max=("glucose", "max"),
        glucose_avg=("glucose", "mean"),
        heart_rate_min=("heart_rate", "min"),
        heart_rate_max=("heart_rate", "max"),
        heart_rate_avg=("heart_rate", "mean"),
        spo2_min=("spo2", "min"),
        spo2_max=("spo2", "max"),
        spo2_avg=("spo2", "mean"),
    )
    for col in ("glucose_avg", "heart_rate_avg", "spo2_avg"):
        g[col] = g[col].round(2)
    return g[columns].sort_values("date").reset_index(drop=True)


@dataclass(frozen=True)
class HistoryPage:
    """One page of the newest-first history table."""

    items: list[Reading]
    page: int
    total_pages: int
    start: int
    end: int
    total: int


def paginate(
    readings: Sequence[Reading], page: int = 1, per_page: int = 5
) -> HistoryPage:
    """Slice ``readings`` into pages; ``page`` is clamped to the valid range.

    ``start``/``end`` are 1-based for "Showing start to end of total".
    """
    if per_page <= 0:
        raise ValueError("per_page must be positive")
    total = len(readings)
    total_pages = math.ceil(total / per_page)
    page = max(1, min(page, total_pages or 1))
    offset = (page - 1) * per_page
    items = list(readings[offset : offset + per_page])
    return HistoryPage(
        items=items,
        page=page,
        total_pages=total_pages,
        start=offset + 1 if items else 0,
        end=offset + len(items),
        total=total,
    )
