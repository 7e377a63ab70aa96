"""
Connectivity definitions for the voxel grid.

Two tiles are neighbours when they sit in the same layer and are one step
apart in any of the 8 king directions (orthogonal + diagonal). Layers are
never connected to each other: the only cross-layer relation is the single
"above" dependency checked by the readiness evaluator.
"""

from collections.abc import Iterator
from typing import Final

from localtypes import Dimensions, Position

# (dx, dy) offsets, in Freeman order
KING_OFFSETS: Final[tuple[tuple[int, int], ...]] = (
    (-1, 0),
    (0, -1),
    (1, 0),
    (0, 1),
    (-1, -1),
    (1, -1),
    (1, 1),
    (-1, 1),
)


def in_bounds(pos: Position, dimensions: Dimensions) -> bool:
    width, height, depth = dimensions
    return 0 <= pos.x < width and 0 <= pos.y < height and 0 <= pos.z < depth


def layer_neighbors(pos: Position, dimensions: Dimensions) -> Iterator[Position]:
    """
    Yield the in-grid 8-neighbours of a position within its layer.

    Out-of-grid coordinates are skipped silently.
    """
    for dx, dy in KING_OFFSETS:
        neighbor = Position(pos.x + dx, pos.y + dy, pos.z)
        if in_bounds(neighbor, dimensions):
            yield neighbor
