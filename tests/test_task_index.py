"""
Tests for the pending task index (safety/task_index.py).
"""

from host import TaskList
from localtypes import Position, TaskKind, TileState
from safety import TaskIndex
from utils.loader import grid_from_layers


class TestRefresh:
    def test_indexes_both_kinds(self):
        grid = grid_from_layers([["cd."]])
        tasks = TaskList(grid)
        channel = tasks.create_task(Position(0, 0, 0))
        dig = tasks.create_task(Position(1, 0, 0))

        index = TaskIndex(tasks)
        index.refresh()

        assert len(index) == 2
        assert index.task_at(Position(0, 0, 0)) == channel
        assert index.task_at(Position(1, 0, 0)) == dig
        assert index.task_at(Position(2, 0, 0)) is None

    def test_refresh_is_a_snapshot(self):
        grid = grid_from_layers([["cc"]])
        tasks = TaskList(grid)
        index = TaskIndex(tasks)
        index.refresh()
        tasks.create_task(Position(0, 0, 0))

        assert len(index) == 0
        index.refresh()
        assert len(index) == 1


class TestCancelAt:
    def test_cancels_live_channel_task(self):
        grid = grid_from_layers([["c"]])
        tasks = TaskList(grid)
        task = tasks.create_task(Position(0, 0, 0))
        assert grid.tile_state(task.pos) is TileState.ACTIVE_CHANNEL

        index = TaskIndex(tasks)
        index.refresh()
        cancelled = index.cancel_at(task.pos)

        assert cancelled == task
        assert tasks.get_task(task.handle) is None
        assert grid.tile_state(task.pos) is TileState.PENDING_CHANNEL
        assert not index.has_task(task.pos)

    def test_cancelled_dig_stays_designated(self):
        grid = grid_from_layers([["d"]])
        tasks = TaskList(grid)
        task = tasks.create_task(Position(0, 0, 0))
        assert task.kind is TaskKind.DIG

        index = TaskIndex(tasks)
        index.refresh()
        index.cancel_at(task.pos)

        assert len(tasks) == 0
        assert grid.tile_state(task.pos) is TileState.PENDING_DIG

    def test_no_task_is_noop(self):
        grid = grid_from_layers([["c"]])
        tasks = TaskList(grid)
        index = TaskIndex(tasks)
        index.refresh()

        assert index.cancel_at(Position(0, 0, 0)) is None
        assert grid.tile_state(Position(0, 0, 0)) is TileState.PENDING_CHANNEL

    def test_stale_task_is_treated_as_absent(self):
        grid = grid_from_layers([["c"]])
        tasks = TaskList(grid, work_ticks=1)
        task = tasks.create_task(Position(0, 0, 0))
        index = TaskIndex(tasks)
        index.refresh()

        assert tasks.advance() == [task]
        assert index.cancel_at(task.pos) is None
        assert len(index) == 0
