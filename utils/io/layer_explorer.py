"""
TUI for watching channel safety at work on a scenario.

Usage:
    uv run python -m utils.io.layer_explorer scenarios/pit.json
"""

import sys

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import DataTable, Footer, Header, Label, Static

from host import Simulation
from localtypes import Position
from plugin import ChannelSafetyPlugin
from utils.display import format_position
from utils.io.tui import TILE_COLORS, UNSAFE_COLOR
from utils.loader import load_scenario


def layer_to_rich_text(simulation: Simulation, z: int, cell_width: int = 2) -> Text:
    """Render one layer with colored blocks, unsafe tiles in red."""
    grid = simulation.grid
    width, height, _ = grid.dimensions
    text = Text()
    for y in range(height):
        for x in range(width):
            pos = Position(x, y, z)
            state = grid.tile_state(pos)
            unsafe = state.is_designated and grid.is_unsafe(pos)
            r, g, b = UNSAFE_COLOR if unsafe else TILE_COLORS[state]
            text.append(" " * cell_width, style=f"on rgb({r},{g},{b})")
        text.append("\n")
    return text


class LayerExplorerApp(App):
    """Step a simulation and inspect its layers and components."""

    TITLE = "Channel Safety Explorer"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("k", "layer_up", "Layer up"),
        Binding("j", "layer_down", "Layer down"),
        Binding("space", "step", "Step 10 ticks"),
        Binding("r", "rebuild", "Rebuild"),
    ]

    CSS = """
    #layer {
        width: auto;
        padding: 1 2;
    }

    #components {
        height: 100%;
    }

    .layer-title {
        text-style: bold;
        padding: 0 2;
    }
    """

    def __init__(self, simulation: Simulation, plugin: ChannelSafetyPlugin, **kwargs) -> None:
        super().__init__(**kwargs)
        self.simulation = simulation
        self.plugin = plugin
        self.z = simulation.grid.dimensions[2] - 1

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Vertical():
                yield Label("", id="layer-title", classes="layer-title")
                yield Static("", id="layer")
            yield DataTable(id="components")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.add_columns("Slot", "Tiles", "Ready", "Blocked", "Tasks")
        self.refresh_view()

    def refresh_view(self) -> None:
        self.sub_title = f"tick {self.simulation.tick}"
        self.query_one("#layer-title", Label).update(f"Layer z={self.z}")
        self.query_one("#layer", Static).update(layer_to_rich_text(self.simulation, self.z))

        table = self.query_one(DataTable)
        table.clear()
        controller = self.plugin.controller
        if controller is None:
            return
        for summary in controller.summaries():
            if summary.z != self.z:
                continue
            first = min(summary.members, key=Position.sort_key)
            table.add_row(
                str(summary.slot),
                f"{len(summary.members)} from {format_position(first)}",
                "yes" if summary.ready else "no",
                str(len(summary.blockers)),
                str(len(summary.with_task)),
            )

    def action_layer_up(self) -> None:
        self.z = min(self.z + 1, self.simulation.grid.dimensions[2] - 1)
        self.refresh_view()

    def action_layer_down(self) -> None:
        self.z = max(self.z - 1, 0)
        self.refresh_view()

    def action_step(self) -> None:
        self.simulation.run(10)
        self.refresh_view()

    def action_rebuild(self) -> None:
        self.plugin.rebuild()
        self.refresh_view()


def main():
    """Run the layer explorer on the scenario given on the command line."""
    if len(sys.argv) != 2:
        print("usage: python -m utils.io.layer_explorer SCENARIO")
        sys.exit(1)

    simulation = Simulation(load_scenario(sys.argv[1]))
    plugin = ChannelSafetyPlugin(
        simulation.grid, simulation.tasks, simulation.events, out=lambda _: None
    )
    plugin.enable()
    simulation.load()
    LayerExplorerApp(simulation, plugin).run()


if __name__ == "__main__":
    main()
