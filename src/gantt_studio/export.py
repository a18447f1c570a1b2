from __future__ import annotations

import math
from datetime import timedelta
from typing import Iterable

from .models import ExportRow, Task, TeamMember

_DAY = timedelta(days=1)


def export_rows(tasks: Iterable[Task], members: Iterable[TeamMember]) -> list[ExportRow]:
    """
    Snapshot tasks as flat records for the external CSV/PDF formatters.

    Assignees are resolved to names; ids without a roster entry are skipped.
    Duration is whole days, rounded up.
    """

    names = {member.id: member.name for member in members}
    rows: list[ExportRow] = []
    for task in tasks:
        assigned = [names[member_id] for member_id in task.assigned_to if member_id in names]
        rows.append(
            ExportRow(
                task_id=task.id,
                title=task.title,
                description=task.description,
                start_date=task.start_date.date().isoformat(),
                end_date=task.end_date.date().isoformat(),
                assigned_to=", ".join(assigned),
                progress=f"{task.progress}%",
                priority=task.priority,
                completed="Yes" if task.completed else "No",
                duration_days=math.ceil(task.duration / _DAY),
            )
        )
    return rows
