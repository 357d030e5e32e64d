"""Clasificacion de valores en bandas de estado clinico."""

from __future__ import annotations

from dataclasses import dataclass

from gluco_track.model import GLUCOSE, HEART_RATE, SPO2


@dataclass(frozen=True)
class Status:
    """Qualitative band for a metric value."""

    label: str
    severity: str


@dataclass(frozen=True)
class MetricInfo:
    """Display metadata for a metric."""

    title: str
    unit: str
    normal_range: str


METRIC_INFO: dict[str, MetricInfo] = {
    GLUCOSE: MetricInfo(title="Glucose", unit="mg/dL", normal_range="70-180 mg/dL"),
    HEART_RATE: MetricInfo(title="Heart Rate", unit="BPM", normal_range="60-100 BPM"),
    SPO2: MetricInfo(title="SpO2", unit="%", normal_range="95-100%"),
}

UNKNOWN = Status("Unknown", "muted")


def classify(metric: str, value: float) -> Status:
    """Map ``value`` of ``metric`` to its status band.

    Boundaries belong to the lower band: glucose 140 is Normal and 180 is
    Elevated. Unknown metrics map to ``Unknown``/``muted``.
    """
    if metric == GLUCOSE:
        if value < 70:
            return Status("Low", "warning")
        if value > 180:
            return Status("High", "danger")
        if value > 140:
            return Status("Elevated", "warning")
        return Status("Normal", "success")

    if metric == HEART_RATE:
        if value < 60:
            return Status("Low", "warning")
        if value > 100:
            return Status("High", "danger")
        return Status("Normal", "success")

    if metric == SPO2:
        if value < 95:
            return Status("Low", "danger")
        if value < 97:
            return Status("Fair", "warning")
        return Status("Excellent", "success")

    return UNKNOWN
