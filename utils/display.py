"""
Text rendering of layers, cycle reports and component dumps.
"""

import sys
from collections.abc import Sequence

from localtypes import GridStore, Position, TileState
from safety import ComponentSummary, CycleReport
from utils.io.tui import RESET, tile_background

TILE_CHARS: dict[TileState, str] = {
    TileState.UNTRACKED: ".",
    TileState.PENDING_DIG: "d",
    TileState.PENDING_CHANNEL: "c",
    TileState.ACTIVE_CHANNEL: "C",
}
UNSAFE_CHAR = "x"


def format_layer(grid: GridStore, z: int) -> str:
    """
    One line per row (y), one character per tile.

    Unsafe designated tiles are shown as 'x' whatever their state.
    """
    width, height, _ = grid.dimensions
    lines = []
    for y in range(height):
        line = []
        for x in range(width):
            pos = Position(x, y, z)
            state = grid.tile_state(pos)
            if state.is_designated and grid.is_unsafe(pos):
                line.append(UNSAFE_CHAR)
            else:
                line.append(TILE_CHARS[state])
        lines.append("".join(line))
    return "\n".join(lines)


def print_layer(grid: GridStore, z: int) -> None:
    width, height, _ = grid.dimensions
    print(f"Layer z={z}")
    for y in range(height):
        for x in range(width):
            pos = Position(x, y, z)
            state = grid.tile_state(pos)
            unsafe = state.is_designated and grid.is_unsafe(pos)
            print(f"{tile_background(state, unsafe)}  ", end="")
        print(RESET)


def print_grid(grid: GridStore, color: bool | None = None) -> None:
    """
    Print every layer, top layer first.

    Colour defaults to on when stdout is a terminal. Without colour the
    layers are printed as characters (see format_layer).
    """
    if color is None:
        color = sys.stdout.isatty()
    _, _, depth = grid.dimensions
    for z in reversed(range(depth)):
        if color:
            print_layer(grid, z)
        else:
            print(f"Layer z={z}")
            print(format_layer(grid, z))


def format_report(report: CycleReport) -> str:
    return (
        f"{report.components} component(s): {report.ready} ready, "
        f"{report.deferred} deferred, {report.unmanaged} unmanaged tile(s), "
        f"{report.held_digs} dig(s) held; "
        f"{len(report.cancelled)} task(s) cancelled, {report.restored} restored"
    )


def format_position(pos: Position) -> str:
    return f"({pos.x},{pos.y},{pos.z})"


def format_components(summaries: Sequence[ComponentSummary]) -> str:
    if not summaries:
        return "No channel components"

    lines = []
    for summary in sorted(summaries, key=lambda s: (s.z, s.slot)):
        state = "ready" if summary.ready else f"blocked by {len(summary.blockers)}"
        lines.append(
            f"Component n°{summary.slot} z={summary.z}: "
            f"{len(summary.members)} tile(s), {state}"
        )
        for pos in sorted(summary.members, key=Position.sort_key):
            marks = []
            if pos in summary.with_task:
                marks.append("task")
            if pos in summary.blockers:
                marks.append("blocked")
            suffix = f" [{', '.join(marks)}]" if marks else ""
            lines.append(f"  {format_position(pos)}{suffix}")
    return "\n".join(lines)
