from __future__ import annotations

from pathlib import Path

import pytest
from dateutil import tz

from gluco_track.context import ClientContext
from gluco_track.dashboard import DashboardFeed, DashboardState, build_dashboard
from gluco_track.errors import AuthRequiredError
from gluco_track.model import (
    DAY_MS,
    GLUCOSE,
    HEART_RATE,
    SPO2,
    HealthProfile,
    Reading,
    TimeWindow,
    UserProfile,
)
from gluco_track.recommend import HIGH_GLUCOSE
from gluco_track.status import UNKNOWN
from gluco_track.storage import SQLiteReadingStore

UTC = tz.UTC
NOW = 1_704_189_600_000


def _readings() -> list[Reading]:
    return [
        Reading(glucose=65, heart_rate=70, spo2=98, timestamp=NOW - 3000, key="a"),
        Reading(glucose=190, heart_rate=105, spo2=94, timestamp=NOW - 1000, key="c"),
        Reading(glucose=120, heart_rate=80, spo2=97, timestamp=NOW - 2000, key="b"),
        Reading(glucose=300, heart_rate=50, spo2=90, timestamp=NOW - 40 * DAY_MS, key="old"),
    ]


def test_build_dashboard_end_to_end() -> None:
    state = build_dashboard(_readings(), TimeWindow.LAST_7_DAYS, NOW, tzinfo_=UTC)
    assert state.latest is not None
    assert state.latest.key == "c"
    assert [r.key for r in state.history] == ["c", "b", "a"]
    glucose = state.stats[GLUCOSE]
    assert (glucose.average, glucose.minimum, glucose.maximum, glucose.current) == (
        125,
        65,
        190,
        190,
    )
    assert state.statuses[GLUCOSE].label == "High"
    assert state.statuses[HEART_RATE].label == "High"
    assert state.statuses[SPO2].label == "Low"
    assert state.recommendations is HIGH_GLUCOSE
    assert state.tips[0].id == "g4"
    assert state.total_readings == 4


def test_build_dashboard_all_time_includes_old_readings() -> None:
    state = build_dashboard(_readings(), TimeWindow.ALL_TIME, NOW)
    assert len(state.history) == 4
    assert state.stats[GLUCOSE].maximum == 300


def test_build_dashboard_latest_ignores_window() -> None:
    old_only = [_readings()[-1]]
    state = build_dashboard(old_only, TimeWindow.LAST_7_DAYS, NOW)
    assert state.latest is not None
    assert state.history == []
    assert state.stats[GLUCOSE].average == 0
    assert state.statuses[GLUCOSE].label == "High"


def test_build_dashboard_empty() -> None:
    state = build_dashboard([], TimeWindow.LAST_7_DAYS, NOW)
    assert state.latest is None
    assert state.recommendations is None
    assert set(state.statuses.values()) == {UNKNOWN}
    assert state.date_range == "No data"
    assert {tip.id for tip in state.tips} == {"gen1", "gen3"}


def test_build_dashboard_uses_profile_condition_and_connection() -> None:
    profile = UserProfile(health=HealthProfile(condition="diabetes"))
    state = build_dashboard([], TimeWindow.LAST_7_DAYS, NOW, profile)
    assert {"g1", "g2"} <= {tip.id for tip in state.tips}
    assert state.connection.connected is False


def test_feed_tracks_store_changes(tmp_path: Path) -> None:
    store = SQLiteReadingStore(tmp_path / "app.sqlite3")
    ctx = ClientContext(store=store, user_id="u1", clock=lambda: NOW)
    feed = DashboardFeed(ctx, TimeWindow.LAST_7_DAYS, UTC)
    states: list[DashboardState] = []
    feed.add_listener(states.append)

    feed.start()
    assert states[-1].latest is None

    for reading in _readings():
        store.append("u1", reading)
    assert feed.state.stats[GLUCOSE].average == 125
    assert feed.state.total_readings == 4

    feed.set_window(TimeWindow.ALL_TIME)
    assert len(feed.state.history) == 4
    assert feed.window is TimeWindow.ALL_TIME

    store.update_connection("u1", True, NOW)
    assert feed.state.connection.connected is True

    feed.stop()
    feed.stop()
    count = len(states)
    store.append_record(
        "u1", {"glucose": 99, "heartRate": 70, "spo2": 98, "timestamp": NOW}
    )
    assert len(states) == count


def test_feed_same_snapshot_is_idempotent(tmp_path: Path) -> None:
    store = SQLiteReadingStore(tmp_path / "app.sqlite3")
    for reading in _readings():
        store.append("u1", reading)
    ctx = ClientContext(store=store, user_id="u1", clock=lambda: NOW)
    feed = DashboardFeed(ctx, tzinfo_=UTC)
    feed.start()
    first = feed.state
    snapshot = store.snapshot("u1")
    feed._on_snapshot(snapshot)
    feed._on_snapshot(snapshot)
    assert feed.state == first
    feed.stop()


def test_feed_requires_user(tmp_path: Path) -> None:
    ctx = ClientContext(store=SQLiteReadingStore(tmp_path / "app.sqlite3"))
    with pytest.raises(AuthRequiredError):
        DashboardFeed(ctx).start()


def test_build_dashboard_tolerates_out_of_range_timestamp() -> None:
    far = Reading(glucose=100, heart_rate=70, spo2=98, timestamp=10**17, key="far")
    state = build_dashboard([far], TimeWindow.ALL_TIME, NOW, tzinfo_=UTC)
    assert state.latest == far
    assert state.date_range != "No data"
