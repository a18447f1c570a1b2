from __future__ import annotations

from typing import Iterable, List, Mapping

from .geometry import layout
from .models import Task, TeamMember, TimelineRow, ViewWindow

UNASSIGNED_COLOR = "#90A4AE"


def to_timeline_rows(
    tasks: Iterable[Task],
    members: Iterable[TeamMember],
    window: ViewWindow,
    conflicts: Mapping[str, set[str]] | None = None,
) -> list[TimelineRow]:
    """
    Convert the tasks visible in `window` into render rows, in task order.

    Tasks outside the window are dropped. A bar takes the colour of its first
    assignee that exists in the roster.
    """

    colors = {member.id: member.color for member in members}
    conflicts = conflicts or {}
    rows: List[TimelineRow] = []

    for task in tasks:
        placement = layout(task, window)
        if placement is None:
            continue
        rows.append(
            TimelineRow(
                order=len(rows),
                task_id=task.id,
                title=task.title,
                placement=placement,
                color=_bar_color(task, colors),
                completed=task.completed,
                progress=task.progress,
                in_conflict=bool(conflicts.get(task.id)),
            )
        )

    return rows


def _bar_color(task: Task, colors: Mapping[str, str]) -> str:
    for member_id in task.assigned_to:
        color = colors.get(member_id)
        if color:
            return color
    return UNASSIGNED_COLOR
