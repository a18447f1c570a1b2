from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Literal


ViewMode = Literal["day", "week", "month"]
"""Timeline granularity: hourly buckets of one day, seven days, or the days of one month."""

Priority = Literal["low", "medium", "high"]

VIEW_MODES: tuple[str, ...] = ("day", "week", "month")
PRIORITIES: tuple[str, ...] = ("low", "medium", "high")


@dataclass(frozen=True)
class TeamMember:
    """Roster entry; assignments reference members by id."""

    id: str
    name: str
    avatar: str
    color: str
    email: str


@dataclass
class Task:
    """Time-bound unit of work shown as a bar on the timeline."""

    id: str
    title: str
    start_date: datetime
    end_date: datetime
    description: str = ""
    assigned_to: list[str] = field(default_factory=list)
    completed: bool = False
    progress: int = 0
    priority: Priority = "medium"
    dependencies: list[str] = field(default_factory=list)

    @property
    def duration(self) -> timedelta:
        return self.end_date - self.start_date

    def overlaps(self, other: "Task") -> bool:
        """Open-interval overlap: touching endpoints do not count."""
        return self.start_date < other.end_date and other.start_date < self.end_date


@dataclass(frozen=True)
class ViewWindow:
    """Visible buckets plus the continuous [start, end] interval used for placement math."""

    mode: ViewMode
    anchor: datetime
    buckets: tuple[datetime, ...]
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def duration_ms(self) -> float:
        return self.duration / timedelta(milliseconds=1)


@dataclass(frozen=True)
class Placement:
    """
    Where a task bar sits inside a window, in percent of the window width.

    The continuation flags tell the presentation layer which edges were clipped.
    """

    left: float
    width: float
    continues_left: bool = False
    continues_right: bool = False

    @property
    def is_partial(self) -> bool:
        return self.continues_left or self.continues_right

    @property
    def right(self) -> float:
        return self.left + self.width


EXPORT_COLUMNS: tuple[str, ...] = (
    "Task ID",
    "Title",
    "Description",
    "Start Date",
    "End Date",
    "Assigned To",
    "Progress",
    "Priority",
    "Completed",
    "Duration (days)",
)


@dataclass(frozen=True)
class ExportRow:
    """Flat, read-only view of one task consumed by the CSV/PDF formatters."""

    task_id: str
    title: str
    description: str
    start_date: str
    end_date: str
    assigned_to: str
    progress: str
    priority: str
    completed: str
    duration_days: int

    def as_record(self) -> dict[str, str | int]:
        """Mapping keyed by export column title, in column order."""
        values = (
            self.task_id,
            self.title,
            self.description,
            self.start_date,
            self.end_date,
            self.assigned_to,
            self.progress,
            self.priority,
            self.completed,
            self.duration_days,
        )
        return dict(zip(EXPORT_COLUMNS, values))


@dataclass
class TimelineRow:
    """
    Flattened view of one visible task used by the SVG snapshot renderer.

    Only the fields relevant to drawing are kept: order, label, placement,
    bar colour and whether the task is double-booked.
    """

    order: int
    task_id: str
    title: str
    placement: Placement
    color: str
    completed: bool = False
    progress: int = 0
    in_conflict: bool = False
