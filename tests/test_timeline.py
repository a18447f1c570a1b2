import datetime as dt

import pytest

from gantt_studio.timeline import (
    TimelineView,
    date_range,
    days_in_month,
    end_of_day,
    navigate,
    view_window,
)

WEDNESDAY = dt.datetime(2024, 6, 12, 15, 30)


def test_day_range_has_hourly_buckets_from_midnight():
    buckets = date_range(WEDNESDAY, "day")

    assert len(buckets) == 24
    assert buckets[0] == dt.datetime(2024, 6, 12, 0, 0)
    assert buckets[-1] == dt.datetime(2024, 6, 12, 23, 0)
    assert all(b2 - b1 == dt.timedelta(hours=1) for b1, b2 in zip(buckets, buckets[1:]))


@pytest.mark.parametrize(
    "anchor",
    [
        dt.datetime(2024, 6, 9, 0, 0),  # Sunday
        dt.datetime(2024, 6, 12, 15, 30),  # Wednesday
        dt.datetime(2024, 6, 15, 23, 59),  # Saturday
    ],
)
def test_week_range_starts_on_sunday(anchor):
    buckets = date_range(anchor, "week")

    assert len(buckets) == 7
    assert buckets[0] == dt.datetime(2024, 6, 9)
    assert buckets[0].isoweekday() == 7
    assert buckets[-1] == dt.datetime(2024, 6, 15)


def test_week_range_crosses_month_boundary():
    buckets = date_range(dt.datetime(2024, 7, 2), "week")

    assert buckets[0] == dt.datetime(2024, 6, 30)
    assert buckets[-1] == dt.datetime(2024, 7, 6)


@pytest.mark.parametrize(
    "anchor, expected",
    [
        (dt.datetime(2024, 2, 10), 29),
        (dt.datetime(2023, 2, 10), 28),
        (dt.datetime(2024, 4, 30), 30),
        (dt.datetime(2024, 12, 31, 18), 31),
    ],
)
def test_month_range_covers_every_day_of_the_month(anchor, expected):
    buckets = date_range(anchor, "month")

    assert len(buckets) == expected == days_in_month(anchor)
    assert buckets[0].day == 1
    assert all((b.year, b.month) == (anchor.year, anchor.month) for b in buckets)
    assert all(b.hour == 0 and b.minute == 0 for b in buckets)


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        date_range(WEDNESDAY, "year")


def test_week_window_ends_at_end_of_last_bucket_day():
    window = view_window(WEDNESDAY, "week")

    assert window.start == dt.datetime(2024, 6, 9)
    assert window.end == dt.datetime(2024, 6, 15, 23, 59, 59, 999000)
    assert window.duration == dt.timedelta(days=7) - dt.timedelta(milliseconds=1)


def test_day_window_spans_the_anchor_day():
    window = view_window(WEDNESDAY, "day")

    assert window.start == dt.datetime(2024, 6, 12)
    assert window.end == end_of_day(WEDNESDAY)
    assert window.duration_ms == 86_400_000 - 1
    assert len(window.buckets) == 24


def test_month_window_ends_on_last_day():
    window = view_window(dt.datetime(2024, 2, 14), "month")

    assert window.start == dt.datetime(2024, 2, 1)
    assert window.end == dt.datetime(2024, 2, 29, 23, 59, 59, 999000)


def test_navigate_steps_by_view_unit():
    assert navigate(WEDNESDAY, "day", 1) == WEDNESDAY + dt.timedelta(days=1)
    assert navigate(WEDNESDAY, "week", -1) == WEDNESDAY - dt.timedelta(days=7)
    assert navigate(dt.datetime(2024, 1, 15), "month", -1) == dt.datetime(2023, 12, 15)


def test_navigate_month_clamps_to_shorter_month():
    assert navigate(dt.datetime(2024, 1, 31, 8), "month", 1) == dt.datetime(2024, 2, 29, 8)
    assert navigate(dt.datetime(2024, 3, 31), "month", 13) == dt.datetime(2025, 4, 30)


def test_timeline_view_tracks_mode_and_anchor():
    view = TimelineView(mode="week", anchor=WEDNESDAY, width_px=700)

    assert view.window().start == dt.datetime(2024, 6, 9)
    view.step(1)
    assert view.window().start == dt.datetime(2024, 6, 16)
    view.set_mode("month")
    assert len(view.buckets()) == 30
    view.go_to_today(clock=lambda: dt.datetime(2025, 1, 1, 12))
    assert view.anchor == dt.datetime(2025, 1, 1, 12)

    with pytest.raises(ValueError):
        view.set_mode("quarter")
