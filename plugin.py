"""
Channel safety plugin: binds the safety controller to the host.

While enabled, the plugin
    - runs a full management cycle every `tick_interval` ticks
    - runs a full cycle immediately on map load, pause and unpause
    - forwards task start and completion events to the incremental path
    - drops its state when the map is unloaded

Commands (run_command):
    enable     create the controller and register the event handlers
    disable    unregister the handlers and drop the controller
    rebuild    run a full cycle now (one-shot when the plugin is disabled)
    dump       print component membership and readiness (never writes)
    status     print whether the plugin is enabled and what it tracks
"""

import logging
from collections.abc import Callable, Sequence
from enum import Enum

from constants import RESERVED_PRIORITY, TICK_INTERVAL
from host.events import EventManager, EventType
from localtypes import GridStore, Task, TaskSystem
from safety import CycleReport, SafetyController
from utils.diagnostics import partition_errors
from utils.display import format_components, format_report

logger = logging.getLogger(__name__)


class CommandResult(Enum):
    OK = 0
    FAILURE = 1


USAGE = "usage: channel-safety [enable|disable|rebuild|dump|status]"


class ChannelSafetyPlugin:
    NAME = "channel-safety"

    def __init__(
        self,
        grid: GridStore,
        task_system: TaskSystem,
        events: EventManager,
        tick_interval: int = TICK_INTERVAL,
        reserved_priority: int = RESERVED_PRIORITY,
        out: Callable[[str], None] = print,
    ) -> None:
        self.grid = grid
        self.task_system = task_system
        self.events = events
        self.tick_interval = tick_interval
        self.reserved_priority = reserved_priority
        self.out = out
        self.controller: SafetyController | None = None
        self.last_tick = 0

    @property
    def enabled(self) -> bool:
        return self.controller is not None

    def _make_controller(self) -> SafetyController:
        return SafetyController(
            self.grid, self.task_system, reserved_priority=self.reserved_priority
        )

    # Lifecycle
    def enable(self) -> None:
        if self.enabled:
            return
        self.controller = self._make_controller()
        self.events.register(EventType.TICK, self._on_tick, self.NAME)
        self.events.register(EventType.TASK_STARTED, self._on_task_started, self.NAME)
        self.events.register(
            EventType.TASK_COMPLETED, self._on_task_completed, self.NAME
        )
        for event_type in (EventType.MAP_LOADED, EventType.PAUSED, EventType.UNPAUSED):
            self.events.register(event_type, self._on_lifecycle, self.NAME)
        self.events.register(EventType.MAP_UNLOADED, self._on_unload, self.NAME)
        logger.info("Channel safety enabled")
        self.controller.manage()

    def disable(self) -> None:
        if self.controller is None:
            return
        self.events.unregister_all(self.NAME)
        self.controller.reset()
        self.controller = None
        logger.info("Channel safety disabled")

    def rebuild(self) -> CycleReport:
        controller = self.controller if self.controller is not None else self._make_controller()
        return controller.manage()

    # Event handlers
    def _on_tick(self, tick: int) -> None:
        if tick - self.last_tick >= self.tick_interval:
            self.last_tick = tick
            self.rebuild()

    def _on_task_started(self, task: Task) -> None:
        if self.controller is not None:
            self.controller.on_task_started(task)

    def _on_task_completed(self, task: Task) -> None:
        if self.controller is not None:
            self.controller.on_task_completed(task)

    def _on_lifecycle(self, _) -> None:
        self.rebuild()

    def _on_unload(self, _) -> None:
        self.last_tick = 0
        if self.controller is not None:
            self.controller.reset()

    # Commands
    def run_command(self, parameters: Sequence[str]) -> CommandResult:
        match list(parameters):
            case [] | ["rebuild"]:
                self.out(format_report(self.rebuild()))
            case ["enable"]:
                self.enable()
            case ["disable"]:
                self.disable()
            case ["dump"]:
                controller = self.controller
                if controller is None:
                    # Read only: no unsafe marks, no cancellations
                    controller = self._make_controller()
                    controller.registry.build(self.grid)
                    controller.task_index.refresh()
                self.out(format_components(controller.summaries()))
                errors = partition_errors(controller.registry, self.grid)
                if errors:
                    # Expected between rebuilds: completed tiles never split components
                    self.out(f"{len(errors)} difference(s) from a fresh labelling:")
                    for error in errors:
                        self.out(f"  {error}")
            case ["status"]:
                self.out(self._status())
            case _:
                self.out(USAGE)
                return CommandResult.FAILURE
        return CommandResult.OK

    def _status(self) -> str:
        if self.controller is None:
            return f"{self.NAME}: disabled"
        return (
            f"{self.NAME}: enabled, {len(self.controller.registry)} component(s), "
            f"{len(self.controller.task_index)} indexed task(s), "
            f"{len(self.controller.deferred)} deferred"
        )
