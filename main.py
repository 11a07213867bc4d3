"""Main entry point for the headless city simulation.

Lays out a small demo district next to the entry point (a street, a row
of houses, a row of offices, a garden and a power plant) and runs it for a
number of ticks, logging a summary every ``--stats-interval`` ticks.
"""

import argparse
import logging
import sys

from tilecity import BuildingKind, CityConfig, CitySimulation, Position, load_config
from tilecity.exceptions import ConfigurationError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
)

logger = logging.getLogger(__name__)

SEPARATOR_WIDTH = 60

# (kind, dx, dy) relative to the entry point
DEMO_DISTRICT = (
    [(BuildingKind.STREET, dx, 0) for dx in range(1, 11)]
    + [(BuildingKind.GARDEN, 1, 1)]
    + [(BuildingKind.HOUSE, dx, 1) for dx in (2, 4, 6, 8)]
    + [(BuildingKind.OFFICE, dx, -1) for dx in (3, 5, 7)]
    + [(BuildingKind.BIOMASS_POWER_PLANT, 9, -1)]
)


def lay_out_demo_district(simulation: CitySimulation) -> int:
    """Request every demo building; returns how many sites were accepted."""
    entry = simulation.config.entry_position
    accepted = 0
    for kind, dx, dy in DEMO_DISTRICT:
        site = simulation.request_construction(kind, Position(entry.x + dx, entry.y + dy))
        if site is not None:
            accepted += 1
    return accepted


def log_stats(simulation: CitySimulation) -> None:
    stats = simulation.get_stats()
    logger.info(
        "tick %d: %d buildings (%d under construction), %d inhabitants "
        "(%d housed, %d employed), population %d, missing power %d Wh",
        stats["tick"],
        stats["buildings"],
        stats["under_construction"],
        stats["inhabitants"],
        stats["housed"],
        stats["employed"],
        stats["population"],
        stats["missing_power_wh"],
    )


def run_headless(config: CityConfig, ticks: int, stats_interval: int) -> CitySimulation:
    """Run the demo district headless.

    Args:
        config: City configuration
        ticks: Number of ticks to simulate
        stats_interval: Log stats every N ticks (0 disables periodic stats)
    """
    with CitySimulation(config) as simulation:
        accepted = lay_out_demo_district(simulation)
        logger.info("Demo district: %d of %d sites accepted", accepted, len(DEMO_DISTRICT))

        for _ in range(ticks):
            simulation.tick()
            if stats_interval and simulation.tick_count % stats_interval == 0:
                log_stats(simulation)

        logger.info("=" * SEPARATOR_WIDTH)
        log_stats(simulation)
        logger.info("=" * SEPARATOR_WIDTH)
    return simulation


def main(argv=None):
    """Parse command-line arguments and run the simulation."""
    parser = argparse.ArgumentParser(
        description="Headless tile-based city simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the demo district for 100 ticks
  python main.py --ticks 100

  # Use a JSON config and write one trace line per tick
  python main.py --ticks 500 --config city.json --trace run.jsonl
        """,
    )

    parser.add_argument(
        "--ticks", type=int, default=100, help="Number of ticks to simulate (default: 100)"
    )

    parser.add_argument(
        "--stats-interval",
        type=int,
        default=10,
        help="Log stats every N ticks (default: 10, 0 to disable)",
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="FILENAME",
        help="JSON configuration file (default: built-in settings)",
    )

    parser.add_argument(
        "--trace",
        type=str,
        default=None,
        metavar="FILENAME",
        help="Append one JSON line per tick to this file",
    )

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else CityConfig()
        if args.trace:
            config = config.with_overrides(trace_output=args.trace)
    except ConfigurationError as e:
        logger.error("Error: %s", e)
        sys.exit(1)

    logger.info("Starting headless simulation...")
    logger.info("Configuration: %d ticks, stats every %d ticks", args.ticks, args.stats_interval)
    if config.trace_output:
        logger.info("Trace will be written to: %s", config.trace_output)
    run_headless(config, args.ticks, args.stats_interval)


if __name__ == "__main__":
    main()
