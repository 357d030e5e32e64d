"""Modelos tipados para lecturas, ventanas de tiempo y perfil de usuario."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

GLUCOSE = "glucose"
HEART_RATE = "heartRate"
SPO2 = "spo2"

METRICS: tuple[str, ...] = (GLUCOSE, HEART_RATE, SPO2)

# Nombre de metrica (formato del store) -> atributo de Reading.
_METRIC_FIELDS: dict[str, str] = {
    GLUCOSE: "glucose",
    HEART_RATE: "heart_rate",
    SPO2: "spo2",
}

DAY_MS = 86_400_000


@dataclass(frozen=True)
class Reading:
    """One glucose / heart rate / SpO2 sample.

    ``timestamp`` is epoch milliseconds once ingested; legacy records may
    still carry a ``"YYYY-MM-DD HH:MM:SS"`` string.
    """

    glucose: float
    heart_rate: float
    spo2: float
    timestamp: int | str
    key: str | None = None

    def value(self, metric: str) -> float:
        """Return the value of ``metric`` (store name, e.g. ``heartRate``)."""
        try:
            attr = _METRIC_FIELDS[metric]
        except KeyError as exc:
            raise ValueError(f"Unknown metric: {metric}") from exc
        return float(getattr(self, attr))

    def to_record(self) -> dict[str, object]:
        """Serialize to the store's wire format."""
        return {
            "glucose": self.glucose,
            "heartRate": self.heart_rate,
            "spo2": self.spo2,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class MetricStatistics:
    """Average/min/max/current for one metric over a collection."""

    average: float = 0
    minimum: float = 0
    maximum: float = 0
    current: float = 0


class TimeWindow(Enum):
    """Rolling retrospective filter applied to the reading collection."""

    LAST_7_DAYS = 7
    LAST_30_DAYS = 30
    LAST_90_DAYS = 90
    ALL_TIME = 0

    @property
    def days(self) -> int:
        return int(self.value)

    @property
    def label(self) -> str:
        if self is TimeWindow.ALL_TIME:
            return "All time"
        return f"Last {self.days} days"

    @classmethod
    def parse(cls, raw: str | int) -> TimeWindow:
        """Parse ``"7"``, ``30``, ``"all"`` or ``"0"`` into a window."""
        text = str(raw).strip().lower()
        if text in ("all", "all time", "0"):
            return cls.ALL_TIME
        try:
            return cls(int(text))
        except ValueError as exc:
            raise ValueError(f"Unsupported time window: {raw!r}") from exc


@dataclass(frozen=True)
class ConnectionState:
    """Device connection flag plus last connection time (epoch ms)."""

    connected: bool = False
    last_connection: int | None = None


@dataclass(frozen=True)
class HealthProfile:
    """Health attributes collected in the profile (not used for selection)."""

    age: int = 0
    weight: int = 0
    height: int = 0
    condition: str = "None"


@dataclass(frozen=True)
class UserProfile:
    """Profile record stored per user."""

    name: str = ""
    device_id: str = ""
    token: str = ""
    connection: ConnectionState = field(default_factory=ConnectionState)
    health: HealthProfile = field(default_factory=HealthProfile)
