from __future__ import annotations

import dataclasses
import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable

from .conflicts import ConflictMap, detect_conflicts
from .events import EventBus, Notification
from .export import export_rows
from .geometry import layout_all
from .models import PRIORITIES, ExportRow, Placement, Task, TeamMember, ViewWindow
from .timeline import utcnow

LOGGER = logging.getLogger(__name__)

NEW_TASK_DURATION = timedelta(days=1)
UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "start_date",
        "end_date",
        "assigned_to",
        "completed",
        "progress",
        "priority",
        "dependencies",
    }
)


class ScheduleValidationError(Exception):
    """Raised when schedule data is structurally invalid (duplicate ids, unknown members, bad fields)."""


def _default_task_id() -> str:
    return uuid.uuid4().hex


class ScheduleStore:
    """
    Canonical in-memory tasks and roster for one session.

    Every applied mutation is followed by a full, synchronous conflict
    recompute. Mutations that would break a task invariant are rejected and
    leave the store unchanged; references to unknown tasks or members are
    ignored.
    """

    def __init__(
        self,
        members: Iterable[TeamMember] = (),
        tasks: Iterable[Task] = (),
        events: EventBus | None = None,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = _default_task_id,
    ) -> None:
        self.events = events if events is not None else EventBus()
        self._clock = clock
        self._id_factory = id_factory
        self._members: dict[str, TeamMember] = {}
        self._tasks: list[Task] = []
        self._conflicts: ConflictMap = {}

        for member in members:
            if member.id in self._members:
                raise ScheduleValidationError(f"Duplicate member id '{member.id}'")
            self._members[member.id] = member

        for task in tasks:
            self._check_insertable(task)
            self._tasks.append(task)

        self._recompute_conflicts()

    # -- queries --------------------------------------------------------

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def members(self) -> list[TeamMember]:
        return list(self._members.values())

    @property
    def conflicts(self) -> ConflictMap:
        return {task_id: set(others) for task_id, others in self._conflicts.items()}

    def conflicts_for(self, task_id: str) -> set[str]:
        return set(self._conflicts.get(task_id, ()))

    def get_task(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def get_member(self, member_id: str) -> TeamMember | None:
        return self._members.get(member_id)

    def active_tasks(self, at: datetime) -> list[Task]:
        """Tasks whose interval contains `at` (the compact list view)."""
        return [task for task in self._tasks if task.start_date <= at <= task.end_date]

    def placements(self, window: ViewWindow) -> dict[str, Placement]:
        return layout_all(self._tasks, window)

    def export_rows(self) -> list[ExportRow]:
        return export_rows(self._tasks, self._members.values())

    # -- mutations ------------------------------------------------------

    def add_task(self, title: str) -> Task | None:
        """Create a one-day, unassigned, medium-priority task starting now; blank titles are ignored."""
        if not title or not title.strip():
            return None

        start = self._clock()
        task = Task(
            id=self._id_factory(),
            title=title,
            start_date=start,
            end_date=start + NEW_TASK_DURATION,
        )
        self._tasks.append(task)
        LOGGER.info("added task %s (%s)", task.id, task.title)
        self.events.emit(Notification("task_added", "Task added successfully!", task.id))
        self._recompute_conflicts()
        return task

    def insert_task(self, task: Task) -> Task:
        """Append a fully formed task, e.g. from a seed file or the collaborator simulator."""
        self._check_insertable(task)
        self._tasks.append(task)
        LOGGER.info("inserted task %s (%s)", task.id, task.title)
        self.events.emit(Notification("task_added", f"Task '{task.title}' added", task.id))
        self._recompute_conflicts()
        return task

    def update_task(self, task_id: str, **fields: Any) -> Task | None:
        """
        Merge `fields` into the task and return it.

        Returns None, leaving the task untouched, when the id is unknown or the
        merged task would be invalid (start not before end, progress outside
        0-100, unknown priority or assignee).
        """

        unknown = sorted(set(fields) - UPDATABLE_FIELDS)
        if unknown:
            raise ScheduleValidationError(f"Cannot update unknown task fields {unknown}")

        task = self.get_task(task_id)
        if task is None:
            return None

        candidate = dataclasses.replace(task, **fields)
        problem = self._invariant_problem(candidate)
        if problem:
            LOGGER.debug("rejected update of task %s: %s", task_id, problem)
            return None

        for name, value in fields.items():
            if isinstance(value, list):
                value = list(value)
            setattr(task, name, value)
        self._recompute_conflicts()
        return task

    def delete_task(self, task_id: str) -> bool:
        task = self.get_task(task_id)
        if task is None:
            return False
        self._tasks.remove(task)
        LOGGER.info("deleted task %s", task_id)
        self.events.emit(Notification("task_deleted", "Task deleted", task_id))
        self._recompute_conflicts()
        return True

    def toggle_assignment(self, task_id: str, member_id: str) -> Task | None:
        task = self.get_task(task_id)
        if task is None or member_id not in self._members:
            return None
        if member_id in task.assigned_to:
            assigned = [existing for existing in task.assigned_to if existing != member_id]
        else:
            assigned = task.assigned_to + [member_id]
        return self.update_task(task_id, assigned_to=assigned)

    def toggle_completion(self, task_id: str) -> Task | None:
        task = self.get_task(task_id)
        if task is None:
            return None
        completed = not task.completed
        return self.update_task(task_id, completed=completed, progress=100 if completed else 0)

    # -- internals ------------------------------------------------------

    def _check_insertable(self, task: Task) -> None:
        if self.get_task(task.id) is not None:
            raise ScheduleValidationError(f"Duplicate task id '{task.id}'")
        problem = self._invariant_problem(task)
        if problem:
            raise ScheduleValidationError(f"Task '{task.id}': {problem}")

    def _invariant_problem(self, task: Task) -> str | None:
        if not task.start_date < task.end_date:
            return f"start {task.start_date} is not before end {task.end_date}"
        if not 0 <= task.progress <= 100:
            return f"progress {task.progress} outside 0-100"
        if task.priority not in PRIORITIES:
            return f"unknown priority '{task.priority}'"
        if len(set(task.assigned_to)) != len(task.assigned_to):
            return "duplicate assignee"
        missing = [member_id for member_id in task.assigned_to if member_id not in self._members]
        if missing:
            return f"unknown members {missing}"
        return None

    def _recompute_conflicts(self) -> None:
        previous = self._conflicts
        self._conflicts = detect_conflicts(self._tasks, self._members.values())
        if self._conflicts and self._conflicts != previous:
            LOGGER.info("%d tasks in conflict", len(self._conflicts))
            self.events.emit(Notification("conflicts_detected", "Scheduling conflicts detected!"))
