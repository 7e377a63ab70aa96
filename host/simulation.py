"""
A minimal host loop driving the grid, the task list and the events.

Each step:
    1. fire TICK with the new tick counter
    2. advance the running tasks, firing TASK_COMPLETED for finished ones
    3. start a task on every workable designation, firing TASK_STARTED

Workable designations are the pending ones without an unsafe mark: this is
how a task cancelled by the safety controller is naturally reissued once
its tile is cleared.
"""

import logging

from localtypes import Task

from .events import EventManager, EventType
from .grid import VoxelGrid
from .tasks import TaskList

logger = logging.getLogger(__name__)


class Simulation:
    def __init__(
        self,
        grid: VoxelGrid,
        tasks: TaskList | None = None,
        events: EventManager | None = None,
    ) -> None:
        self.grid = grid
        self.tasks = tasks if tasks is not None else TaskList(grid)
        self.events = events if events is not None else EventManager()
        self.tick = 0
        self.paused = False
        self.loaded = False

    # Lifecycle
    def load(self) -> None:
        self.loaded = True
        self.events.fire(EventType.MAP_LOADED)

    def unload(self) -> None:
        self.loaded = False
        self.events.fire(EventType.MAP_UNLOADED)

    def pause(self) -> None:
        if not self.paused:
            self.paused = True
            self.events.fire(EventType.PAUSED)

    def unpause(self) -> None:
        if self.paused:
            self.paused = False
            self.events.fire(EventType.UNPAUSED)

    # Loop
    def step(self) -> None:
        if self.paused or not self.loaded:
            return
        self.tick += 1
        self.events.fire(EventType.TICK, self.tick)

        for task in self.tasks.advance():
            self.events.fire(EventType.TASK_COMPLETED, task)

        for task in self.dispatch():
            self.events.fire(EventType.TASK_STARTED, task)

    def dispatch(self) -> list[Task]:
        started = []
        for pos in self.grid.workable_positions():
            if self.tasks.task_at(pos) is None:
                started.append(self.tasks.create_task(pos))
        if started:
            logger.debug(f"Tick {self.tick}: started {len(started)} task(s)")
        return started

    def run(self, ticks: int) -> None:
        for _ in range(ticks):
            self.step()

    def is_finished(self) -> bool:
        """Nothing workable left and nothing running."""
        return not len(self.tasks) and not any(
            True for _ in self.grid.workable_positions()
        )
