from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable

from .models import VIEW_MODES, ViewMode, ViewWindow

HOURS_PER_DAY = 24
DAYS_PER_WEEK = 7


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    """Last representable millisecond of the calendar day: 23:59:59.999."""
    return moment.replace(hour=23, minute=59, second=59, microsecond=999_000)


def days_in_month(moment: datetime) -> int:
    return calendar.monthrange(moment.year, moment.month)[1]


def date_range(anchor: datetime, mode: ViewMode) -> list[datetime]:
    """
    Return the ordered bucket start timestamps visible for `mode` around `anchor`.

    - day: 24 hourly buckets from the anchor's midnight.
    - week: 7 daily buckets from the Sunday on or before the anchor.
    - month: one bucket per calendar day of the anchor's month.
    """

    midnight = start_of_day(anchor)

    if mode == "day":
        return [midnight + timedelta(hours=hour) for hour in range(HOURS_PER_DAY)]

    if mode == "week":
        # datetime.weekday() is Monday=0; shift so that Sunday=0.
        days_since_sunday = (midnight.weekday() + 1) % DAYS_PER_WEEK
        sunday = midnight - timedelta(days=days_since_sunday)
        return [sunday + timedelta(days=offset) for offset in range(DAYS_PER_WEEK)]

    if mode == "month":
        first = midnight.replace(day=1)
        return [first + timedelta(days=offset) for offset in range(days_in_month(anchor))]

    raise ValueError(f"unknown view mode '{mode}', expected one of {list(VIEW_MODES)}")


def view_window(anchor: datetime, mode: ViewMode) -> ViewWindow:
    """
    Build the window used as the denominator for placement and drag math.

    Week and month windows run from the first bucket to the end of the last
    bucket's day. The day window is taken from the anchor day directly.
    """

    buckets = date_range(anchor, mode)
    if mode == "day":
        start, end = start_of_day(anchor), end_of_day(anchor)
    else:
        start, end = buckets[0], end_of_day(buckets[-1])
    return ViewWindow(mode=mode, anchor=anchor, buckets=tuple(buckets), start=start, end=end)


def navigate(anchor: datetime, mode: ViewMode, direction: int) -> datetime:
    """Step the anchor by `direction` days, weeks or months depending on the view."""

    if mode == "day":
        return anchor + timedelta(days=direction)
    if mode == "week":
        return anchor + timedelta(days=DAYS_PER_WEEK * direction)
    if mode == "month":
        month_index = anchor.year * 12 + (anchor.month - 1) + direction
        year, month = divmod(month_index, 12)
        month += 1
        day = min(anchor.day, calendar.monthrange(year, month)[1])
        return anchor.replace(year=year, month=month, day=day)
    raise ValueError(f"unknown view mode '{mode}', expected one of {list(VIEW_MODES)}")


def utcnow() -> datetime:
    """Current UTC wall-clock time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today(clock: Callable[[], datetime] = utcnow) -> datetime:
    """Anchor for the "jump to today" action."""
    return clock()


@dataclass
class TimelineView:
    """
    Current view mode, anchor and on-screen timeline width.

    The window is derived on demand, so changing the mode or anchor is seen by
    every later placement or drag computation.
    """

    mode: ViewMode = "week"
    anchor: datetime = field(default_factory=utcnow)
    width_px: float = 0.0

    def window(self) -> ViewWindow:
        return view_window(self.anchor, self.mode)

    def buckets(self) -> list[datetime]:
        return date_range(self.anchor, self.mode)

    def set_mode(self, mode: ViewMode) -> None:
        if mode not in VIEW_MODES:
            raise ValueError(f"unknown view mode '{mode}', expected one of {list(VIEW_MODES)}")
        self.mode = mode

    def step(self, direction: int) -> datetime:
        self.anchor = navigate(self.anchor, self.mode, direction)
        return self.anchor

    def go_to_today(self, clock: Callable[[], datetime] = utcnow) -> datetime:
        self.anchor = today(clock)
        return self.anchor
