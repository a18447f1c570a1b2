from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal, Optional

from .events import Notification
from .models import Task, ViewWindow
from .store import ScheduleStore
from .timeline import TimelineView

LOGGER = logging.getLogger(__name__)

DragKind = Literal["move", "resize-left", "resize-right"]
PointerEventType = Literal["pointer_down", "pointer_move", "pointer_up"]
PointerSource = Literal["mouse", "touch"]

DRAG_KINDS: tuple[str, ...] = ("move", "resize-left", "resize-right")
MIN_RESIZE_DURATION = timedelta(days=1)


@dataclass(frozen=True)
class PointerEvent:
    event_type: PointerEventType
    x: Optional[float] = None
    task_id: Optional[str] = None
    kind: DragKind = "move"
    source: PointerSource = "mouse"


@dataclass(frozen=True)
class DragSession:
    """
    State held between pointer-down and pointer-up.

    anchor_date is the task boundary being dragged: end_date for resize-right,
    start_date otherwise. window/timeline_width are only set when the
    conversion basis is frozen at drag start.
    """

    task_id: str
    kind: DragKind
    anchor_x: float
    anchor_date: datetime
    window: Optional[ViewWindow] = None
    timeline_width: Optional[float] = None


class DragController:
    """
    Turns pointer gestures on task bars into date changes on the store.

    Idle -> Dragging on pointer-down over a bar or one of its edge handles,
    Dragging -> Idle on pointer-up anywhere. While dragging, each move converts
    the horizontal pixel offset into a time offset and proposes new dates.
    Proposals that would shrink a task below one day are dropped for that
    move only.

    By default the window and timeline width are re-read on every move, so a
    view change mid-drag changes the drag's sensitivity. Pass
    snapshot_basis=True to freeze both at drag start instead.
    """

    def __init__(self, store: ScheduleStore, view: TimelineView, snapshot_basis: bool = False) -> None:
        self._store = store
        self._view = view
        self._snapshot_basis = snapshot_basis
        self._session: DragSession | None = None

    @property
    def session(self) -> DragSession | None:
        return self._session

    @property
    def is_dragging(self) -> bool:
        return self._session is not None

    def handle(self, event: PointerEvent) -> bool:
        """Feed one mouse or touch event; return True when it changed state or dates."""
        if event.event_type == "pointer_down":
            if event.task_id is None or event.x is None:
                return False
            return self.pointer_down(event.task_id, event.x, event.kind)
        if event.event_type == "pointer_move":
            if event.x is None:
                return False
            return self.pointer_move(event.x)
        if event.event_type == "pointer_up":
            return self.pointer_up() is not None
        raise ValueError(f"unsupported pointer event '{event.event_type}'")

    def pointer_down(self, task_id: str, x: float, kind: DragKind = "move") -> bool:
        if kind not in DRAG_KINDS:
            raise ValueError(f"unknown drag kind '{kind}', expected one of {list(DRAG_KINDS)}")
        if self._session is not None:
            return False

        task = self._store.get_task(task_id)
        if task is None:
            return False

        anchor_date = task.end_date if kind == "resize-right" else task.start_date
        window = width = None
        if self._snapshot_basis:
            window, width = self._view.window(), self._view.width_px
        self._session = DragSession(
            task_id=task_id,
            kind=kind,
            anchor_x=x,
            anchor_date=anchor_date,
            window=window,
            timeline_width=width,
        )
        LOGGER.debug("drag %s started on task %s at x=%s", kind, task_id, x)
        return True

    def pointer_move(self, x: float) -> bool:
        """Propose new dates for the dragged task; return True when the store accepted them."""
        session = self._session
        if session is None:
            return False

        task = self._store.get_task(session.task_id)
        if task is None:
            return False

        proposed = self._proposed_date(session, x)
        if proposed is None:
            return False

        if session.kind == "move":
            updated = self._store.update_task(
                task.id, start_date=proposed, end_date=proposed + task.duration
            )
        elif session.kind == "resize-left":
            if not _valid_resize(proposed, task.end_date):
                LOGGER.debug("rejected start %s for task %s", proposed, task.id)
                return False
            updated = self._store.update_task(task.id, start_date=proposed)
        else:
            if not _valid_resize(task.start_date, proposed):
                LOGGER.debug("rejected end %s for task %s", proposed, task.id)
                return False
            updated = self._store.update_task(task.id, end_date=proposed)

        return updated is not None

    def pointer_up(self) -> Task | None:
        """End the drag session, if any, and return the task it moved."""
        session = self._session
        self._session = None
        if session is None:
            return None

        LOGGER.debug("drag %s finished on task %s", session.kind, session.task_id)
        self._store.events.emit(Notification("task_updated", "Task updated", session.task_id))
        return self._store.get_task(session.task_id)

    def _proposed_date(self, session: DragSession, x: float) -> datetime | None:
        if session.window is not None and session.timeline_width is not None:
            window, width = session.window, session.timeline_width
        else:
            window, width = self._view.window(), self._view.width_px

        total_ms = window.duration_ms
        if width <= 0 or total_ms <= 0:
            return None

        pixels_per_ms = width / total_ms
        ms_moved = (x - session.anchor_x) / pixels_per_ms
        return session.anchor_date + timedelta(milliseconds=ms_moved)


def _valid_resize(start: datetime, end: datetime) -> bool:
    return start < end and end - start >= MIN_RESIZE_DURATION
