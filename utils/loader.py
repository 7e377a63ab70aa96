"""
Module used to build grids from scenario files

A scenario is a JSON object:
    {
        "priority": 4,              # optional, default designation priority
        "layers": [                 # bottom layer (z=0) first
            ["cc.", "c..", "..."],  # rows (y), one character per column (x)
            ...
        ]
    }

Tile characters:
    .   nothing designated
    d   dig
    c   channel
    r   channel with reserved priority (left alone)
    n   channel without priority metadata (left alone)
"""

import json
from collections.abc import Sequence
from pathlib import Path

from constants import DEFAULT_PRIORITY, RESERVED_PRIORITY
from host.grid import VoxelGrid
from localtypes import Position, TileState


class ScenarioError(ValueError):
    """Raised when a scenario cannot be turned into a grid."""

    pass


def grid_from_layers(
    layers: Sequence[Sequence[str]], priority: int = DEFAULT_PRIORITY
) -> VoxelGrid:
    if not layers or not layers[0] or not layers[0][0]:
        raise ScenarioError("A scenario needs at least one non-empty layer")

    height, width, depth = len(layers[0]), len(layers[0][0]), len(layers)
    for z, rows in enumerate(layers):
        if len(rows) != height or any(len(row) != width for row in rows):
            raise ScenarioError(
                f"Layer {z} is not {width}x{height} like the bottom layer"
            )

    grid = VoxelGrid(width, height, depth)
    for z, rows in enumerate(layers):
        for y, row in enumerate(rows):
            for x, char in enumerate(row):
                pos = Position(x, y, z)
                match char:
                    case ".":
                        pass
                    case "d":
                        grid.designate(pos, TileState.PENDING_DIG, priority)
                    case "c":
                        grid.designate(pos, TileState.PENDING_CHANNEL, priority)
                    case "r":
                        grid.designate(pos, TileState.PENDING_CHANNEL, RESERVED_PRIORITY)
                    case "n":
                        grid.designate(pos, TileState.PENDING_CHANNEL, None)
                    case _:
                        raise ScenarioError(f"Unknown tile character {char!r} at {pos}")
    return grid


def load_scenario(path: str | Path) -> VoxelGrid:
    with open(path, "r") as file:
        try:
            data = json.load(file)
        except json.JSONDecodeError as error:
            raise ScenarioError(f"{path} is not valid JSON: {error}") from error

    if not isinstance(data, dict) or not isinstance(data.get("layers"), list):
        raise ScenarioError(f"{path}: expected an object with a 'layers' list")
    return grid_from_layers(data["layers"], data.get("priority", DEFAULT_PRIORITY))
