"""
Tests for the in-memory host: grid, task list, events and loader.
"""

import json

import pytest

from constants import BLOCK_SIZE, DEFAULT_PRIORITY, RESERVED_PRIORITY
from host import EventManager, EventType, TaskList, VoxelGrid
from localtypes import GridStore, Position, TaskKind, TaskSystem, TileState
from utils.display import format_layer, print_grid
from utils.loader import ScenarioError, grid_from_layers, load_scenario


class TestVoxelGrid:
    def test_is_a_grid_store(self):
        assert isinstance(VoxelGrid(1, 1, 1), GridStore)

    def test_invalid_dimensions(self):
        with pytest.raises(ValueError):
            VoxelGrid(0, 3, 3)

    def test_defaults(self):
        grid = VoxelGrid(2, 3, 4)
        pos = Position(1, 2, 3)
        assert grid.dimensions == (2, 3, 4)
        assert grid.tile_state(pos) is TileState.UNTRACKED
        assert not grid.is_unsafe(pos)
        assert grid.priority(pos) is None

    def test_outside_access_raises(self):
        grid = VoxelGrid(2, 2, 2)
        assert not grid.contains(Position(2, 0, 0))
        with pytest.raises(ValueError, match="outside"):
            grid.tile_state(Position(0, 0, -1))

    def test_designate_flags_block(self):
        grid = VoxelGrid(BLOCK_SIZE * 2, BLOCK_SIZE, 1)
        pos = Position(BLOCK_SIZE + 1, 3, 0)
        block = grid.block_at(pos)
        assert block.origin == Position(BLOCK_SIZE, 0, 0)
        assert not block.designated

        grid.designate(pos)

        assert grid.block_at(pos).designated
        assert not grid.block_at(Position(0, 0, 0)).designated
        assert grid.priority(pos) == DEFAULT_PRIORITY

    def test_resolve(self):
        grid = VoxelGrid(1, 1, 1)
        pos = Position(0, 0, 0)
        grid.designate(pos)
        grid.set_unsafe(pos, True)
        grid.resolve(pos)

        assert grid.tile_state(pos) is TileState.UNTRACKED
        assert grid.priority(pos) is None
        assert not grid.is_unsafe(pos)

    def test_layer_states_is_indexed_by_x_then_y(self):
        grid = VoxelGrid(3, 2, 1)
        grid.designate(Position(2, 1, 0))
        assert grid.layer_states(0).shape == (3, 2)
        assert grid.layer_states(0)[2, 1] == TileState.PENDING_CHANNEL.value

    def test_workable_positions_skip_unsafe_and_active(self):
        grid = grid_from_layers([["cd"], ["cc"]])
        grid.set_unsafe(Position(0, 0, 0), True)
        grid.set_tile_state(Position(1, 0, 1), TileState.ACTIVE_CHANNEL)

        workable = list(grid.workable_positions())

        assert workable == [Position(0, 0, 1), Position(1, 0, 0)]


class TestTaskList:
    def test_is_a_task_system(self):
        assert isinstance(TaskList(VoxelGrid(1, 1, 1)), TaskSystem)

    def test_channel_task_activates_tile(self):
        grid = grid_from_layers([["c"]])
        tasks = TaskList(grid)
        task = tasks.create_task(Position(0, 0, 0))

        assert task.kind is TaskKind.CHANNEL
        assert grid.tile_state(task.pos) is TileState.ACTIVE_CHANNEL
        assert tasks.pending_tasks() == [task]

    def test_remove_reverts_tile(self):
        grid = grid_from_layers([["c"]])
        tasks = TaskList(grid)
        task = tasks.create_task(Position(0, 0, 0))
        tasks.remove_task(task.handle)

        assert grid.tile_state(task.pos) is TileState.PENDING_CHANNEL
        assert tasks.get_task(task.handle) is None

    def test_remove_unknown_handle(self):
        tasks = TaskList(VoxelGrid(1, 1, 1))
        with pytest.raises(KeyError):
            tasks.remove_task(99)

    def test_create_requires_pending_designation(self):
        grid = grid_from_layers([["c."]])
        tasks = TaskList(grid)
        with pytest.raises(ValueError, match="No pending designation"):
            tasks.create_task(Position(1, 0, 0))
        tasks.create_task(Position(0, 0, 0))
        with pytest.raises(ValueError):
            tasks.create_task(Position(0, 0, 0))

    def test_advance_completes_after_work(self):
        grid = grid_from_layers([["d"]])
        tasks = TaskList(grid, work_ticks=2)
        task = tasks.create_task(Position(0, 0, 0))

        assert tasks.advance() == []
        assert tasks.advance() == [task]
        assert grid.tile_state(task.pos) is TileState.UNTRACKED
        assert len(tasks) == 0

    def test_handles_are_unique(self):
        grid = grid_from_layers([["cc"]])
        tasks = TaskList(grid)
        first = tasks.create_task(Position(0, 0, 0))
        second = tasks.create_task(Position(1, 0, 0))
        assert first.handle != second.handle


class TestEventManager:
    def test_fire_in_registration_order(self):
        events = EventManager()
        seen = []
        events.register(EventType.TICK, lambda tick: seen.append(("a", tick)), "a")
        events.register(EventType.TICK, lambda tick: seen.append(("b", tick)), "b")

        events.fire(EventType.TICK, 7)
        assert seen == [("a", 7), ("b", 7)]

    def test_unregister_all_by_owner(self):
        events = EventManager()
        seen = []
        events.register(EventType.PAUSED, seen.append, "a")
        events.register(EventType.PAUSED, lambda _: seen.append("b"), "b")
        events.unregister_all("a")

        events.fire(EventType.PAUSED)
        assert seen == ["b"]


class TestLoader:
    def test_tile_characters(self):
        grid = grid_from_layers([["cdrn."]], priority=2)
        assert grid.tile_state(Position(0, 0, 0)) is TileState.PENDING_CHANNEL
        assert grid.priority(Position(0, 0, 0)) == 2
        assert grid.tile_state(Position(1, 0, 0)) is TileState.PENDING_DIG
        assert grid.priority(Position(2, 0, 0)) == RESERVED_PRIORITY
        assert grid.priority(Position(3, 0, 0)) is None
        assert grid.tile_state(Position(4, 0, 0)) is TileState.UNTRACKED

    def test_layers_are_bottom_first(self):
        grid = grid_from_layers([["c."], [".c"]])
        assert format_layer(grid, 0) == "c."
        assert format_layer(grid, 1) == ".c"

    def test_unknown_character(self):
        with pytest.raises(ScenarioError, match="Unknown tile character"):
            grid_from_layers([["c?"]])

    def test_ragged_layers(self):
        with pytest.raises(ScenarioError):
            grid_from_layers([["cc", "c"]])
        with pytest.raises(ScenarioError):
            grid_from_layers([["cc"], ["ccc"]])

    def test_empty_scenario(self):
        with pytest.raises(ScenarioError):
            grid_from_layers([])

    def test_load_scenario(self, tmp_path):
        path = tmp_path / "scenario.json"
        path.write_text(json.dumps({"priority": 1, "layers": [["c."], ["dc"]]}))

        grid = load_scenario(path)

        assert grid.dimensions == (2, 1, 2)
        assert grid.priority(Position(0, 0, 0)) == 1
        assert grid.tile_state(Position(0, 0, 1)) is TileState.PENDING_DIG

    def test_load_malformed_scenario(self, tmp_path):
        path = tmp_path / "scenario.json"
        path.write_text("{not json")
        with pytest.raises(ScenarioError, match="not valid JSON"):
            load_scenario(path)

        path.write_text(json.dumps({"rows": []}))
        with pytest.raises(ScenarioError, match="'layers'"):
            load_scenario(path)


class TestDisplay:
    def test_plain_grid_is_printed_top_layer_first(self, capsys):
        grid = grid_from_layers([["cd"], ["c."]])
        grid.set_unsafe(Position(0, 0, 0), True)

        print_grid(grid, color=False)

        assert capsys.readouterr().out.splitlines() == [
            "Layer z=1",
            "c.",
            "Layer z=0",
            "xd",
        ]
