"""
Run a scenario through the host simulation with channel safety enabled.

    python main.py scenarios/pit.json --ticks 300 --show
    python main.py scenarios/pit.json --command dump
"""

import argparse
import logging
import sys

from constants import TICK_INTERVAL
from host import Simulation
from plugin import ChannelSafetyPlugin, CommandResult
from utils.display import print_grid
from utils.loader import ScenarioError, load_scenario

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)


def run(
    scenario: str,
    ticks: int,
    interval: int = TICK_INTERVAL,
    safety: bool = True,
    commands: list[str] | None = None,
    show: bool = False,
) -> int:
    simulation = Simulation(load_scenario(scenario))
    plugin = ChannelSafetyPlugin(
        simulation.grid, simulation.tasks, simulation.events, tick_interval=interval
    )
    if safety:
        plugin.enable()

    simulation.load()
    simulation.run(ticks)
    logger.info(
        f"Ran {simulation.tick} tick(s): {len(simulation.tasks)} task(s) running, "
        f"finished: {simulation.is_finished()}"
    )

    status = 0
    for command in commands or []:
        if plugin.run_command(command.split()) is CommandResult.FAILURE:
            status = 1

    if show:
        print_grid(simulation.grid)
    return status


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Channel safety simulation")
    parser.add_argument("scenario", help="Scenario JSON file")
    parser.add_argument("--ticks", type=int, default=300, help="Ticks to simulate")
    parser.add_argument(
        "--interval",
        type=int,
        default=TICK_INTERVAL,
        help="Ticks between full management cycles",
    )
    parser.add_argument(
        "--unsafe", action="store_true", help="Run without channel safety"
    )
    parser.add_argument(
        "--command",
        action="append",
        default=[],
        help="Plugin command to run after the simulation (repeatable)",
    )
    parser.add_argument("--show", action="store_true", help="Print the layers")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        status = run(
            args.scenario,
            args.ticks,
            interval=args.interval,
            safety=not args.unsafe,
            commands=args.command,
            show=args.show,
        )
    except (OSError, ScenarioError) as error:
        logger.error(str(error))
        status = 2
    sys.exit(status)
