from __future__ import annotations

from datetime import timezone

from dateutil import tz

from gluco_track.timestamps import (
    compare_timestamps,
    format_timestamp,
    is_representable,
    parse_timestamp_string,
    to_datetime,
    to_epoch_millis,
)

UTC = tz.UTC
JAN_2_10AM_MS = 1_704_189_600_000


def test_parse_timestamp_string_utc() -> None:
    assert parse_timestamp_string("2024-01-02 10:00:00", UTC) == JAN_2_10AM_MS


def test_parse_timestamp_string_strips_wrapping_characters() -> None:
    assert parse_timestamp_string('*"2024-01-02 10:00:00"*', UTC) == JAN_2_10AM_MS


def test_parse_timestamp_string_rejects_other_shapes() -> None:
    assert parse_timestamp_string("2024-01-02", UTC) is None
    assert parse_timestamp_string("not a date", UTC) is None
    assert parse_timestamp_string("2024-13-40 99:00:00", UTC) is None


def test_compare_timestamps_numbers_and_strings() -> None:
    assert compare_timestamps(2, 1) == 1
    assert compare_timestamps(1, 2) == -1
    assert compare_timestamps(5, 5) == 0
    assert compare_timestamps("2024-01-02 10:00:00", "2024-01-01 23:59:59") == 1


def test_compare_timestamps_mixed_types_do_not_raise() -> None:
    result = compare_timestamps(JAN_2_10AM_MS, "garbage")
    assert result in (-1, 0, 1)
    assert compare_timestamps("garbage", JAN_2_10AM_MS) == -result


def test_to_epoch_millis_unparsable_counts_as_now() -> None:
    assert to_epoch_millis("garbage", now_ms=123) == 123
    assert to_epoch_millis(None, now_ms=456) == 456
    assert to_epoch_millis(JAN_2_10AM_MS, now_ms=0) == JAN_2_10AM_MS
    assert to_epoch_millis("2024-01-02 10:00:00", now_ms=0, tzinfo_=UTC) == (
        JAN_2_10AM_MS
    )


def test_to_datetime_and_format_in_zone() -> None:
    dt = to_datetime(JAN_2_10AM_MS, UTC)
    assert dt.utcoffset() == timezone.utc.utcoffset(None)
    assert (dt.year, dt.month, dt.day, dt.hour) == (2024, 1, 2, 10)
    assert format_timestamp(JAN_2_10AM_MS, UTC) == "01/02/2024 10:00 AM"
    assert format_timestamp(JAN_2_10AM_MS + 5 * 3_600_000, UTC) == "01/02/2024 3:00 PM"
    assert format_timestamp(JAN_2_10AM_MS - 10 * 3_600_000, UTC) == (
        "01/02/2024 12:00 AM"
    )


def test_is_representable_bounds() -> None:
    assert is_representable(JAN_2_10AM_MS)
    assert not is_representable(10**17)
    assert not is_representable(-(10**17))


def test_to_datetime_out_of_range_counts_as_now() -> None:
    dt = to_datetime(10**17, UTC)
    assert dt.year < 3000
    assert format_timestamp(10**20, UTC)
