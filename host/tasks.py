"""
In-memory task list, the reference TaskSystem.

Creating a channel task turns the tile into ACTIVE_CHANNEL; removing it
reverts the tile to PENDING_CHANNEL. Dig tasks leave the tile as
PENDING_DIG throughout. A task completes after a fixed amount of work,
which resolves (digs out) its tile.
"""

import itertools
import logging
from dataclasses import dataclass

from constants import WORK_TICKS
from localtypes import Position, Task, TaskHandle, TaskKind, TileState

from .grid import VoxelGrid

logger = logging.getLogger(__name__)

KIND_OF_STATE: dict[TileState, TaskKind] = {
    TileState.PENDING_DIG: TaskKind.DIG,
    TileState.PENDING_CHANNEL: TaskKind.CHANNEL,
}


@dataclass
class _Entry:
    task: Task
    remaining: int


class TaskList:
    def __init__(self, grid: VoxelGrid, work_ticks: int = WORK_TICKS) -> None:
        self.grid = grid
        self.work_ticks = work_ticks
        self._entries: dict[TaskHandle, _Entry] = {}
        self._handles = itertools.count(1)

    def create_task(self, pos: Position) -> Task:
        """Start work on a pending designation."""
        state = self.grid.tile_state(pos)
        if state not in KIND_OF_STATE:
            raise ValueError(f"No pending designation at {pos} (state: {state.name})")
        if self.task_at(pos) is not None:
            raise ValueError(f"A task already exists at {pos}")

        task = Task(next(self._handles), KIND_OF_STATE[state], pos)
        self._entries[task.handle] = _Entry(task, self.work_ticks)
        if task.kind is TaskKind.CHANNEL:
            self.grid.set_tile_state(pos, TileState.ACTIVE_CHANNEL)
        return task

    def pending_tasks(self) -> list[Task]:
        return [entry.task for entry in self._entries.values()]

    def get_task(self, handle: TaskHandle) -> Task | None:
        entry = self._entries.get(handle)
        return None if entry is None else entry.task

    def task_at(self, pos: Position) -> Task | None:
        for entry in self._entries.values():
            if entry.task.pos == pos:
                return entry.task
        return None

    def remove_task(self, handle: TaskHandle) -> None:
        try:
            entry = self._entries.pop(handle)
        except KeyError:
            raise KeyError(f"Unknown task handle: {handle}") from None
        pos = entry.task.pos
        if self.grid.tile_state(pos) is TileState.ACTIVE_CHANNEL:
            self.grid.set_tile_state(pos, TileState.PENDING_CHANNEL)

    def advance(self) -> list[Task]:
        """Do one tick of work on every task, returning the completed ones."""
        completed = []
        for handle, entry in list(self._entries.items()):
            entry.remaining -= 1
            if entry.remaining <= 0:
                del self._entries[handle]
                self.grid.resolve(entry.task.pos)
                completed.append(entry.task)
                logger.debug(f"Completed {entry.task.kind.value} at {entry.task.pos}")
        return completed

    def __len__(self) -> int:
        return len(self._entries)
