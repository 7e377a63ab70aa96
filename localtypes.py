"""
Type definitions for channel safety management.

This module contains the types shared by the safety core and the host
collaborators: positions, tile states, tasks and the collaborator protocols.

Coordinate Convention:
    Positions use (x, y, z) order, where z is the elevation layer and
    increases upward. "Above" a position is z + 1, "below" is z - 1.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Protocol, runtime_checkable

import numpy as np


# Coordinate systems
class Position(NamedTuple):
    x: int
    y: int
    z: int

    @property
    def above(self) -> Position:
        return Position(self.x, self.y, self.z + 1)

    @property
    def below(self) -> Position:
        return Position(self.x, self.y, self.z - 1)

    def sort_key(self) -> tuple[int, int, int]:
        """Layer first, then column."""
        return (self.z, self.x, self.y)


Dimensions = tuple[int, int, int]  # (width, height, depth)
TaskHandle = int


class TileState(Enum):
    """Designation of a tile, as stored by the grid."""

    UNTRACKED = 0
    PENDING_DIG = 1  # Shallow excavation, designated
    PENDING_CHANNEL = 2  # Deep excavation, designated
    ACTIVE_CHANNEL = 3  # Deep excavation, a task is executing

    @property
    def is_target(self) -> bool:
        """Target tiles are the ones grouped into components."""
        return self in (TileState.PENDING_CHANNEL, TileState.ACTIVE_CHANNEL)

    @property
    def is_designated(self) -> bool:
        return self is not TileState.UNTRACKED


TARGET_STATE_VALUES: tuple[int, ...] = tuple(
    state.value for state in TileState if state.is_target
)


class TaskKind(Enum):
    DIG = "dig"
    CHANNEL = "channel"


class TileStatus(Enum):
    """Managed state of a tile after evaluation."""

    UNMANAGED = "unmanaged"
    READY = "ready"
    DEFERRED = "deferred"


@dataclass(frozen=True, slots=True)
class Task:
    """
    A pending excavation operation, as reported by the task system.

    The handle is opaque: only the task system that issued it can resolve
    or remove the task.
    """

    handle: TaskHandle
    kind: TaskKind
    pos: Position


@runtime_checkable
class Block(Protocol):
    """A BLOCK_SIZE x BLOCK_SIZE patch of one layer."""

    origin: Position
    designated: bool


@runtime_checkable
class GridStore(Protocol):
    """Accessor over the live voxel grid."""

    @property
    def dimensions(self) -> Dimensions: ...

    def contains(self, pos: Position) -> bool: ...

    def tile_state(self, pos: Position) -> TileState: ...

    def set_tile_state(self, pos: Position, state: TileState) -> None: ...

    def is_unsafe(self, pos: Position) -> bool: ...

    def set_unsafe(self, pos: Position, unsafe: bool) -> None: ...

    def priority(self, pos: Position) -> int | None: ...

    def layer_states(self, z: int) -> np.ndarray:
        """Tile state values of a layer, indexed [x, y]."""
        ...

    def block_at(self, pos: Position) -> Block: ...


@runtime_checkable
class TaskSystem(Protocol):
    """Accessor over the live task list."""

    def pending_tasks(self) -> Iterable[Task]: ...

    def get_task(self, handle: TaskHandle) -> Task | None: ...

    def remove_task(self, handle: TaskHandle) -> None:
        """Remove a task; the grid reverts its tile to the pending designation."""
        ...


__all__ = [
    "Position",
    "Dimensions",
    "TaskHandle",
    "TileState",
    "TARGET_STATE_VALUES",
    "TaskKind",
    "TileStatus",
    "Task",
    "Block",
    "GridStore",
    "TaskSystem",
]
