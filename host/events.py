"""
Notification mechanism of the host.

Handlers are registered per event type under an owner name, so that a
plugin can drop all of its handlers at once. Events are dispatched
synchronously, in registration order: handlers never overlap in time.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class EventType(Enum):
    TICK = "tick"  # payload: monotonically increasing tick counter
    TASK_STARTED = "task_started"  # payload: Task
    TASK_COMPLETED = "task_completed"  # payload: Task
    MAP_LOADED = "map_loaded"
    MAP_UNLOADED = "map_unloaded"
    PAUSED = "paused"
    UNPAUSED = "unpaused"


Handler = Callable[[Any], None]


class EventManager:
    def __init__(self) -> None:
        self._handlers: defaultdict[EventType, list[tuple[str, Handler]]] = (
            defaultdict(list)
        )

    def register(self, event_type: EventType, handler: Handler, owner: str) -> None:
        self._handlers[event_type].append((owner, handler))

    def unregister_all(self, owner: str) -> None:
        for event_type, handlers in self._handlers.items():
            self._handlers[event_type] = [
                (name, handler) for name, handler in handlers if name != owner
            ]
        logger.debug(f"Unregistered every handler of {owner}")

    def handlers(self, event_type: EventType) -> list[Handler]:
        return [handler for _, handler in self._handlers[event_type]]

    def fire(self, event_type: EventType, payload: Any = None) -> None:
        for handler in self.handlers(event_type):
            handler(payload)
