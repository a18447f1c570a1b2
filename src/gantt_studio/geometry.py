from __future__ import annotations

from typing import Iterable

from .models import Placement, Task, ViewWindow

# One hour on a 24-slot scale keeps short bars clickable in the day view.
DAY_MIN_WIDTH_PCT = 8.33
RANGE_MIN_WIDTH_PCT = 1.0
FULL_WIDTH_PCT = 100.0


def layout(task: Task, window: ViewWindow) -> Placement | None:
    """
    Place `task` inside `window`, or return None when the two do not overlap.

    - The bar covers only the visible part of the task.
    - Widths are floored (8.33% for the day view, 1% otherwise) and then
      capped so the bar never runs past the right edge.
    - continues_left / continues_right report which side was clipped.
    """

    if task.end_date < window.start or task.start_date > window.end:
        return None

    visible_start = max(task.start_date, window.start)
    visible_end = min(task.end_date, window.end)

    total = window.duration
    left = max(0.0, (visible_start - window.start) / total * FULL_WIDTH_PCT)
    raw_width = (visible_end - visible_start) / total * FULL_WIDTH_PCT

    min_width = DAY_MIN_WIDTH_PCT if window.mode == "day" else RANGE_MIN_WIDTH_PCT
    width = min(max(raw_width, min_width), FULL_WIDTH_PCT - left)

    return Placement(
        left=left,
        width=width,
        continues_left=task.start_date < window.start,
        continues_right=task.end_date > window.end,
    )


def layout_all(tasks: Iterable[Task], window: ViewWindow) -> dict[str, Placement]:
    """Placements for every visible task, keyed by task id, in input order."""
    placements: dict[str, Placement] = {}
    for task in tasks:
        placement = layout(task, window)
        if placement is not None:
            placements[task.id] = placement
    return placements
