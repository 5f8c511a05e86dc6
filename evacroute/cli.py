"""
Command-line interface for the evacuation router.

Usage:
    python -m evacroute.cli route "U..|...|..S"        Plan one route and print it
    python -m evacroute.cli route --file floor.txt     Plan a route for a layout file
    python -m evacroute.cli simulate scenario.yaml     Replay position/fire updates
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console

from evacroute.config import Config, load_config, setup_logging
from evacroute.controller import ReactiveRecomputeController, RouteResult
from evacroute.exceptions import EvacRouteError
from evacroute.render import render_result
from evacroute.routing import CellCode, GridMap, plan_evacuation
from evacroute.storage import JsonFileExporter, MapDocumentStore

logger = logging.getLogger(__name__)

console = Console()


def cmd_route(args: argparse.Namespace) -> int:
    """Plan a single route and print the annotated layout."""
    config: Config = args.config_obj

    if args.file:
        layout = Path(args.file).read_text(encoding="utf-8").strip()
    elif args.layout:
        layout = args.layout
    else:
        console.print("[red]Error:[/red] give a layout string or --file")
        return 2

    try:
        grid = GridMap.parse(layout)
    except EvacRouteError as e:
        console.print(f"[red]Error:[/red] {e}")
        return 2

    user = grid.find_position(CellCode.USER)
    exit_pos = grid.find_position(CellCode.EXIT)
    if user is None or exit_pos is None:
        console.print("[red]Error:[/red] user or exit not found on the map")
        return 2

    plan = plan_evacuation(grid, user, exit_pos, config.controller.meters_per_cell)
    console.print(render_result(RouteResult.from_plan(plan)))
    return 0 if plan.success else 1


def _ignite(layout: str, cells: list[list[int]]) -> str:
    """Set fire to [row, column] cells of a layout."""
    grid = GridMap.parse(layout)
    for row, column in cells:
        grid.rows[row][column] = CellCode.FIRE.value
    return grid.serialize()


async def run_scenario(scenario: dict[str, Any], config: Config) -> list[RouteResult]:
    """
    Replay a scenario against a store watched by a recompute controller.

    Scenario format:
        buildings: {<name>: {<floor number>: <layout>}}
        steps:
          - position: {building, floor, row, column}
          - fire: [[row, column], ...]       # ignite cells on the current map
          - layout: <layout string>          # replace the current layout

    Returns:
        The current map result after each step
    """
    store = MapDocumentStore()
    for building, floors in (scenario.get("buildings") or {}).items():
        for floor_number, layout in floors.items():
            store.add_floor(building, int(floor_number), layout)

    sinks: list = [store]
    if config.export.enabled:
        sinks.append(JsonFileExporter(config.export.path))
    controller = ReactiveRecomputeController(sinks, config.controller)
    controller.attach(store)

    results = []
    for i, step in enumerate(scenario.get("steps") or [], start=1):
        if "position" in step:
            pos = step["position"]
            store.update_position(pos["building"], int(pos["floor"]), int(pos["row"]), int(pos["column"]))
        elif "fire" in step:
            current = store.get_current() or {}
            store.update_current({"layout": _ignite(current.get("layout", ""), step["fire"])})
        elif "layout" in step:
            store.update_current({"layout": step["layout"]})
        else:
            logger.warning(f"Step {i}: unknown step {step!r}, skipping")
            continue

        await store.drain()
        result = RouteResult.from_document(store.get_current() or {})
        results.append(result)
        console.rule(f"Step {i}")
        console.print(render_result(result))

    return results


def cmd_simulate(args: argparse.Namespace) -> int:
    """Replay a YAML scenario of position and fire updates."""
    with open(args.scenario) as f:
        scenario = yaml.safe_load(f) or {}

    config: Config = args.config_obj
    if args.no_delay:
        config.controller.commit_delay = 0.0
        config.controller.base_delay = 0.0

    try:
        asyncio.run(run_scenario(scenario, config))
    except EvacRouteError as e:
        logger.exception(f"Scenario failed: {e}")
        console.print(f"[red]Error:[/red] {e}")
        return 1
    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Evacuation router - fire-aware turn-by-turn exit guidance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--log-level",
        "-l",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level override",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # route command
    route_parser = subparsers.add_parser("route", help="Plan a route for one layout")
    route_parser.add_argument("layout", nargs="?", default=None, help="Layout string, rows separated by '|'")
    route_parser.add_argument("--file", "-f", type=str, default=None, help="Read the layout from a file")
    route_parser.set_defaults(func=cmd_route)

    # simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Replay a scenario file")
    simulate_parser.add_argument("scenario", type=str, help="Path to scenario YAML")
    simulate_parser.add_argument(
        "--no-delay",
        action="store_true",
        help="Skip commit and retry delays",
    )
    simulate_parser.set_defaults(func=cmd_simulate)

    args = parser.parse_args()

    # Load config and set up logging
    config = load_config(args.config)
    if args.log_level:
        config.logging.level = args.log_level
    setup_logging(config.logging)
    args.config_obj = config

    if args.command is None:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
