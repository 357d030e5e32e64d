"""Estado derivado del tablero, recalculado en cada snapshot del store."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Any

from gluco_track.aggregate import (
    date_range_display,
    filter_by_window,
    sort_descending,
    summarize,
)
from gluco_track.context import ClientContext
from gluco_track.ingest import readings_from_snapshot
from gluco_track.model import (
    METRICS,
    ConnectionState,
    MetricStatistics,
    Reading,
    TimeWindow,
    UserProfile,
)
from gluco_track.recommend import Recommendations, recommend_for
from gluco_track.status import UNKNOWN, Status, classify
from gluco_track.storage import Subscription
from gluco_track.tips import HealthTip, select_tips

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardState:
    """Everything the presentation layer renders for one snapshot."""

    window: TimeWindow
    latest: Reading | None = None
    history: list[Reading] = field(default_factory=list)
    stats: dict[str, MetricStatistics] = field(default_factory=dict)
    statuses: dict[str, Status] = field(default_factory=dict)
    recommendations: Recommendations | None = None
    tips: list[HealthTip] = field(default_factory=list)
    connection: ConnectionState = field(default_factory=ConnectionState)
    date_range: str = "No data"
    total_readings: int = 0


def build_dashboard(
    readings: Sequence[Reading],
    window: TimeWindow,
    now_ms: int,
    profile: UserProfile | None = None,
    tzinfo_: tzinfo | None = None,
) -> DashboardState:
    """Derive the dashboard from a full, already ingested collection.

    The latest reading, its statuses and the recommendations come from the
    whole collection; history and statistics from the ``window`` view.
    """
    profile = profile or UserProfile()
    ordered = sort_descending(readings)
    newest = ordered[0] if ordered else None
    history = filter_by_window(ordered, window, now_ms)

    if newest is None:
        statuses = {metric: UNKNOWN for metric in METRICS}
        recommendations = None
        tips = select_tips(None, None, None, profile.health.condition)
    else:
        statuses = {metric: classify(metric, newest.value(metric)) for metric in METRICS}
        recommendations = recommend_for(newest.glucose)
        tips = select_tips(
            newest.glucose,
            newest.heart_rate,
            newest.spo2,
            profile.health.condition,
        )

    return DashboardState(
        window=window,
        latest=newest,
        history=history,
        stats=summarize(history),
        statuses=statuses,
        recommendations=recommendations,
        tips=tips,
        connection=profile.connection,
        date_range=date_range_display(history, tzinfo_),
        total_readings=len(ordered),
    )


class DashboardFeed:
    """Observable dashboard state bound to one user's store subscriptions.

    Each reading snapshot replaces the previous collection entirely, so
    repeated delivery of the same snapshot yields the same state.
    """

    def __init__(
        self,
        context: ClientContext,
        window: TimeWindow = TimeWindow.LAST_7_DAYS,
        tzinfo_: tzinfo | None = None,
    ) -> None:
        self._context = context
        self._window = window
        self._tz = tzinfo_
        self._readings: list[Reading] = []
        self._profile = UserProfile()
        self._subs: list[Subscription] = []
        self._listeners: list[Callable[[DashboardState], None]] = []
        self._state = DashboardState(window=window)

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def window(self) -> TimeWindow:
        return self._window

    def add_listener(self, callback: Callable[[DashboardState], None]) -> None:
        self._listeners.append(callback)

    def start(self) -> None:
        """Subscribe to readings and profile; no-op when already running."""
        if self._subs:
            return
        user_id = self._context.require_user()
        store = self._context.store
        self._subs = [
            store.subscribe_profile(user_id, self._on_profile),
            store.subscribe(user_id, self._on_snapshot),
        ]

    def stop(self) -> None:
        """Cancel subscriptions; safe to call repeatedly."""
        for sub in self._subs:
            sub.cancel()
        self._subs = []

    def set_window(self, window: TimeWindow) -> None:
        self._window = window
        self._rebuild()

    def _on_snapshot(self, snapshot: Any) -> None:
        self._readings = readings_from_snapshot(snapshot, tzinfo_=self._tz)
        logger.debug("Snapshot with %d valid readings", len(self._readings))
        self._rebuild()

    def _on_profile(self, profile: UserProfile) -> None:
        self._profile = profile
        self._rebuild()

    def _rebuild(self) -> None:
        self._state = build_dashboard(
            self._readings,
            self._window,
            self._context.now(),
            self._profile,
            self._tz,
        )
        for callback in list(self._listeners):
            callback(self._state)
