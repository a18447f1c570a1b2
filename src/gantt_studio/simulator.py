from __future__ import annotations

import logging
import random
import sched
from datetime import timedelta
from typing import Optional

from .models import PRIORITIES, Task
from .store import ScheduleStore

LOGGER = logging.getLogger(__name__)

COLLABORATOR_INTERVAL_S = 60.0
GAP_AFTER_LAST_TASK = timedelta(days=1)
COLLABORATOR_TASK_SPAN = timedelta(days=2)


class CollaboratorSimulator:
    """
    Periodically appends a task "added by" a random team member.

    The simulator owns no timer. Call tick() directly, or attach() it to a
    sched.scheduler that the host loop drives.
    """

    def __init__(
        self,
        store: ScheduleStore,
        rng: Optional[random.Random] = None,
        interval: float = COLLABORATOR_INTERVAL_S,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._store = store
        self._rng = rng or random.Random()
        self.interval = interval
        self.produced = 0
        self._scheduler: sched.scheduler | None = None
        self._pending: sched.Event | None = None

    def tick(self) -> Task | None:
        """Produce one task after the last one in the store; no-op without tasks or members."""
        tasks = self._store.tasks
        members = self._store.members
        if not tasks or not members:
            return None

        collaborator = self._rng.choice(members)
        last = tasks[-1]
        start = last.end_date + GAP_AFTER_LAST_TASK
        number = self.produced + 1
        task_id = f"collab-{number}"
        while self._store.get_task(task_id) is not None:
            number += 1
            task_id = f"collab-{number}"

        task = Task(
            id=task_id,
            title=f"Collaborator Task {self.produced + 1}",
            description=f"Added by {collaborator.name}",
            start_date=start,
            end_date=start + COLLABORATOR_TASK_SPAN,
            assigned_to=[collaborator.id],
            priority=self._rng.choice(PRIORITIES),
        )
        self._store.insert_task(task)
        self.produced += 1
        LOGGER.info("%s added %s", collaborator.name, task.id)
        return task

    def attach(self, scheduler: sched.scheduler) -> None:
        """Register a self-rearming tick on `scheduler`."""
        self.detach()
        self._scheduler = scheduler
        self._pending = scheduler.enter(self.interval, 0, self._run)

    def detach(self) -> None:
        if self._scheduler is not None and self._pending is not None:
            try:
                self._scheduler.cancel(self._pending)
            except ValueError:
                pass  # already fired
        self._scheduler = None
        self._pending = None

    @property
    def attached(self) -> bool:
        return self._scheduler is not None

    def _run(self) -> None:
        self.tick()
        if self._scheduler is not None:
            self._pending = self._scheduler.enter(self.interval, 0, self._run)
