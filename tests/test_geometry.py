import datetime as dt

import pytest

from gantt_studio.geometry import DAY_MIN_WIDTH_PCT, RANGE_MIN_WIDTH_PCT, layout, layout_all
from gantt_studio.models import Task
from gantt_studio.timeline import view_window

ANCHOR = dt.datetime(2024, 6, 12, 10, 0)
WEEK = view_window(ANCHOR, "week")  # Sun 2024-06-09 .. Sat 2024-06-15 23:59:59.999
DAY = view_window(ANCHOR, "day")


def _task(start, end, task_id="T"):
    return Task(id=task_id, title=task_id, start_date=start, end_date=end)


def test_task_outside_window_is_not_visible():
    before = _task(dt.datetime(2024, 6, 1), dt.datetime(2024, 6, 8, 23))
    after = _task(dt.datetime(2024, 6, 16), dt.datetime(2024, 6, 20))

    assert layout(before, WEEK) is None
    assert layout(after, WEEK) is None


def test_task_touching_window_start_is_visible_with_minimum_width():
    touching = _task(dt.datetime(2024, 6, 1), WEEK.start)

    placement = layout(touching, WEEK)

    assert placement is not None
    assert placement.left == 0
    assert placement.width == RANGE_MIN_WIDTH_PCT
    assert placement.continues_left
    assert not placement.continues_right


def test_task_inside_week_is_placed_proportionally():
    placement = layout(_task(dt.datetime(2024, 6, 10), dt.datetime(2024, 6, 11)), WEEK)

    assert placement.left == pytest.approx(100 / 7, rel=1e-6)
    assert placement.width == pytest.approx(100 / 7, rel=1e-6)
    assert not placement.is_partial


def test_task_spanning_whole_week_is_clipped_on_both_sides():
    placement = layout(_task(dt.datetime(2024, 6, 1), dt.datetime(2024, 6, 20)), WEEK)

    assert placement.left == 0
    assert placement.width == pytest.approx(100)
    assert placement.continues_left and placement.continues_right
    assert placement.is_partial


def test_day_view_task_from_yesterday_to_tomorrow():
    task = _task(dt.datetime(2024, 6, 11, 12), dt.datetime(2024, 6, 13, 6))

    placement = layout(task, DAY)

    assert placement is not None
    assert placement.continues_left is True
    assert placement.continues_right is True
    assert placement.left == 0
    assert placement.width == pytest.approx(100)


def test_day_view_floors_short_tasks_to_one_hour_width():
    placement = layout(_task(dt.datetime(2024, 6, 12, 6), dt.datetime(2024, 6, 12, 6, 5)), DAY)

    assert placement.width == DAY_MIN_WIDTH_PCT
    assert placement.left == pytest.approx(25, rel=1e-6)


def test_day_view_minimum_width_never_runs_past_right_edge():
    placement = layout(_task(dt.datetime(2024, 6, 12, 23, 30), dt.datetime(2024, 6, 12, 23, 45)), DAY)

    assert placement.width < DAY_MIN_WIDTH_PCT
    assert placement.left + placement.width == pytest.approx(100)


def test_week_view_floors_short_tasks_to_one_percent():
    placement = layout(_task(dt.datetime(2024, 6, 12, 9), dt.datetime(2024, 6, 12, 9, 1)), WEEK)

    assert placement.width == RANGE_MIN_WIDTH_PCT


@pytest.mark.parametrize("window", [DAY, WEEK, view_window(ANCHOR, "month")])
def test_visible_placements_stay_inside_the_window(window):
    base = dt.datetime(2024, 5, 25)
    for start_h in range(0, 24 * 40, 7):
        for length_h in (0.1, 1, 5, 30, 200):
            start = base + dt.timedelta(hours=start_h)
            task = _task(start, start + dt.timedelta(hours=length_h))
            placement = layout(task, window)
            hidden = task.end_date < window.start or task.start_date > window.end
            if hidden:
                assert placement is None
                continue
            assert placement is not None
            assert 0 <= placement.left <= 100
            assert placement.left + placement.width <= 100 + 1e-9


def test_layout_all_skips_invisible_tasks():
    tasks = [
        _task(dt.datetime(2024, 6, 10), dt.datetime(2024, 6, 11), "in"),
        _task(dt.datetime(2024, 7, 1), dt.datetime(2024, 7, 2), "out"),
    ]

    placements = layout_all(tasks, WEEK)

    assert list(placements) == ["in"]
