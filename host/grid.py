"""
In-memory voxel grid, the reference GridStore.

Tile data lives in numpy arrays indexed [x, y, z]:
    - states:   TileState values
    - unsafe:   the unsafe mark
    - priority: designation priority, NO_PRIORITY when the metadata is absent

Layers are further cut into BLOCK_SIZE x BLOCK_SIZE blocks carrying a
`designated` flag, set whenever something in the block is designated.
"""

from collections.abc import Iterator

import numpy as np

from constants import BLOCK_SIZE, DEFAULT_PRIORITY
from localtypes import Dimensions, Position, TileState

NO_PRIORITY = -1


class GridBlock:
    """View over one block of a VoxelGrid."""

    def __init__(self, grid: "VoxelGrid", index: tuple[int, int, int]) -> None:
        self._grid = grid
        self._index = index
        bx, by, z = index
        self.origin = Position(bx * BLOCK_SIZE, by * BLOCK_SIZE, z)

    @property
    def designated(self) -> bool:
        return bool(self._grid._block_designated[self._index])

    @designated.setter
    def designated(self, value: bool) -> None:
        self._grid._block_designated[self._index] = value

    def __repr__(self) -> str:
        return f"GridBlock(origin={self.origin}, designated={self.designated})"


class VoxelGrid:
    def __init__(self, width: int, height: int, depth: int) -> None:
        if width <= 0 or height <= 0 or depth <= 0:
            raise ValueError(
                f"Grid dimensions must be positive, got {(width, height, depth)}"
            )
        shape = (width, height, depth)
        self._states = np.zeros(shape, dtype=np.int8)
        self._unsafe = np.zeros(shape, dtype=bool)
        self._priority = np.full(shape, NO_PRIORITY, dtype=np.int16)
        self._block_designated = np.zeros(
            (-(-width // BLOCK_SIZE), -(-height // BLOCK_SIZE), depth), dtype=bool
        )

    @property
    def dimensions(self) -> Dimensions:
        width, height, depth = self._states.shape
        return (width, height, depth)

    def contains(self, pos: Position) -> bool:
        width, height, depth = self._states.shape
        return 0 <= pos.x < width and 0 <= pos.y < height and 0 <= pos.z < depth

    def _check(self, pos: Position) -> None:
        if not self.contains(pos):
            raise ValueError(f"{pos} is outside the grid {self.dimensions}")

    # Tile state
    def tile_state(self, pos: Position) -> TileState:
        self._check(pos)
        return TileState(int(self._states[pos]))

    def set_tile_state(self, pos: Position, state: TileState) -> None:
        self._check(pos)
        self._states[pos] = state.value
        if state.is_designated:
            self.block_at(pos).designated = True

    def is_unsafe(self, pos: Position) -> bool:
        self._check(pos)
        return bool(self._unsafe[pos])

    def set_unsafe(self, pos: Position, unsafe: bool) -> None:
        self._check(pos)
        self._unsafe[pos] = unsafe

    def priority(self, pos: Position) -> int | None:
        self._check(pos)
        value = int(self._priority[pos])
        return None if value == NO_PRIORITY else value

    def set_priority(self, pos: Position, priority: int | None) -> None:
        self._check(pos)
        self._priority[pos] = NO_PRIORITY if priority is None else priority

    # Designations
    def designate(
        self,
        pos: Position,
        state: TileState = TileState.PENDING_CHANNEL,
        priority: int | None = DEFAULT_PRIORITY,
    ) -> None:
        self.set_tile_state(pos, state)
        self.set_priority(pos, priority)

    def resolve(self, pos: Position) -> None:
        """The tile has been dug out: drop its designation and metadata."""
        self.set_tile_state(pos, TileState.UNTRACKED)
        self.set_priority(pos, None)
        self.set_unsafe(pos, False)

    # Batched access
    def layer_states(self, z: int) -> np.ndarray:
        return self._states[:, :, z]

    def block_at(self, pos: Position) -> GridBlock:
        self._check(pos)
        return GridBlock(self, (pos.x // BLOCK_SIZE, pos.y // BLOCK_SIZE, pos.z))

    def workable_positions(self) -> Iterator[Position]:
        """Designated tiles without an unsafe mark and not yet being worked, top layer first."""
        pending = np.isin(
            self._states, (TileState.PENDING_DIG.value, TileState.PENDING_CHANNEL.value)
        )
        for x, y, z in sorted(
            np.argwhere(pending & ~self._unsafe).tolist(), key=lambda xyz: -xyz[2]
        ):
            yield Position(x, y, z)

    def count(self, state: TileState) -> int:
        return int(np.count_nonzero(self._states == state.value))
