"""Modo demo: genera lecturas plausibles sin dispositivo."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from gluco_track.context import ClientContext
from gluco_track.model import DAY_MS, Reading

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricProfile:
    """Normal distribution clipped to a physiological range."""

    mean: float
    std: float
    low: float
    high: float


GLUCOSE_PROFILE = MetricProfile(mean=120, std=35, low=50, high=300)
HEART_RATE_PROFILE = MetricProfile(mean=78, std=12, low=45, high=140)
SPO2_PROFILE = MetricProfile(mean=97.5, std=1.2, low=88, high=100)


class DemoSimulator:
    """Writes random readings through the store, like a real device would."""

    def __init__(
        self,
        context: ClientContext,
        rng: np.random.Generator | None = None,
    ) -> None:
        self._context = context
        self._rng = rng if rng is not None else np.random.default_rng()

    def _draw(self, profile: MetricProfile) -> int:
        value = self._rng.normal(profile.mean, profile.std)
        return int(round(float(np.clip(value, profile.low, profile.high))))

    def sample(self, timestamp_ms: int) -> Reading:
        """One random reading stamped at ``timestamp_ms`` (not stored)."""
        return Reading(
            glucose=self._draw(GLUCOSE_PROFILE),
            heart_rate=self._draw(HEART_RATE_PROFILE),
            spo2=self._draw(SPO2_PROFILE),
            timestamp=timestamp_ms,
            key=str(timestamp_ms),
        )

    def tick(self) -> Reading:
        """Store one reading stamped now; meant to run on a timer."""
        user_id = self._context.require_user()
        reading = self.sample(self._context.now())
        self._context.store.append(user_id, reading)
        return reading

    def backfill(self, days: int, per_day: int = 4) -> list[Reading]:
        """Store ``per_day`` readings for each of the last ``days`` days."""
        if days <= 0 or per_day <= 0:
            return []
        user_id = self._context.require_user()
        now = self._context.now()
        step = DAY_MS // per_day
        stored: list[Reading] = []
        for i in range(days * per_day, 0, -1):
            jitter = int(self._rng.integers(0, max(step // 4, 1)))
            reading = self.sample(now - i * step + jitter)
            if self._context.store.append(user_id, reading) is not None:
                stored.append(reading)
        logger.info("Backfilled %d demo readings for user %s", len(stored), user_id)
        return stored
