from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional

LOGGER = logging.getLogger(__name__)

NotificationKind = Literal[
    "task_added",
    "task_deleted",
    "task_updated",
    "conflicts_detected",
]

Listener = Callable[["Notification"], None]


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    message: str
    task_id: Optional[str] = None


class EventBus:
    """
    Synchronous fan-out of engine notifications to the presentation layer.

    Listeners run in subscription order on the caller's thread. A failing
    listener is logged and skipped so the remaining ones still see the event.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, notification: Notification) -> None:
        LOGGER.debug("notify %s: %s", notification.kind, notification.message)
        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception:
                LOGGER.exception("notification listener failed for %s", notification.kind)
