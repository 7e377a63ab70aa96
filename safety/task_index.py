"""
Snapshot of pending excavation tasks, keyed by position.

The index does not own tasks: it holds the records handed out by the task
system and asks the task system to remove them. A recorded task that the
task system no longer knows is stale and treated as absent.
"""

import logging

from localtypes import Position, Task, TaskKind, TaskSystem

logger = logging.getLogger(__name__)


class TaskIndex:
    def __init__(self, task_system: TaskSystem) -> None:
        self.task_system = task_system
        self._channel_tasks: dict[Position, Task] = {}
        # Dig tasks only matter for the above/below checks of the event path
        self._dig_tasks: dict[Position, Task] = {}

    def refresh(self) -> None:
        """Rebuild the snapshot from the live task list."""
        self.clear()
        for task in self.task_system.pending_tasks():
            self.track(task)
        logger.debug(
            f"Indexed {len(self._channel_tasks)} channel task(s), "
            f"{len(self._dig_tasks)} dig task(s)"
        )

    def clear(self) -> None:
        self._channel_tasks.clear()
        self._dig_tasks.clear()

    def track(self, task: Task) -> None:
        match task.kind:
            case TaskKind.CHANNEL:
                self._channel_tasks[task.pos] = task
            case TaskKind.DIG:
                self._dig_tasks[task.pos] = task

    def untrack(self, pos: Position) -> None:
        self._channel_tasks.pop(pos, None)
        self._dig_tasks.pop(pos, None)

    def task_at(self, pos: Position) -> Task | None:
        """The recorded task at pos, if it is still live."""
        task = self._channel_tasks.get(pos) or self._dig_tasks.get(pos)
        if task is None:
            return None
        if self.task_system.get_task(task.handle) is None:
            # Completed or removed since the last refresh
            self.untrack(pos)
            return None
        return task

    def has_task(self, pos: Position) -> bool:
        return self.task_at(pos) is not None

    def cancel(self, task: Task) -> None:
        """
        Pull an in-flight task.

        The designation survives: the task system reverts the tile to its
        pending form so the work is naturally reissued later.
        """
        self.task_system.remove_task(task.handle)
        self.untrack(task.pos)
        logger.debug(f"Cancelled {task.kind.value} task {task.handle} at {task.pos}")

    def cancel_at(self, pos: Position) -> Task | None:
        """Cancel the live task at pos. Returns it, or None if there was none."""
        task = self.task_at(pos)
        if task is not None:
            self.cancel(task)
        return task

    def __len__(self) -> int:
        return len(self._channel_tasks) + len(self._dig_tasks)
