"""CLI for running elevator dispatch simulations from TOML configs."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from dispatch import DEFAULT_STRATEGY, StrategyLoadError, load_strategy
from simulation import (
    ArrivalQueue,
    ConfigurationError,
    InvalidFloorError,
    QueueFileError,
    Simulation,
    SimulationStatistics,
    compare_strategies,
    load_config,
)

logger = logging.getLogger("run_simulation")


def load_queue(config, queue_path: Optional[Path]) -> ArrivalQueue:
    if queue_path is not None:
        return ArrivalQueue.load(queue_path)
    return ArrivalQueue.generate(config)


def save_results(output_path: Optional[Path], data: Dict) -> None:
    if not output_path:
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2))


def print_statistics(statistics: SimulationStatistics) -> None:
    print(f"Duration: {statistics.simulation_time:.1f}s ({statistics.simulation_time / 60.0:.1f} minutes)")
    print(f"Total users: {statistics.total_users}")
    print(f"Completed: {statistics.completed_users}")
    print(f"Average wait time: {statistics.average_wait_time:.2f}s")
    print(f"Average ride time: {statistics.average_ride_time:.2f}s")
    print(f"Average total time: {statistics.average_total_time:.2f}s")
    print(f"Elevator utilization: {statistics.elevator_utilization * 100:.1f}%")


def command_run(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    strategy = load_strategy(args.algorithm)
    queue = load_queue(config, args.queue)
    simulation = Simulation(config, strategy, queue=queue)
    statistics = simulation.run()

    print(f"Strategy: {strategy.name}")
    print_statistics(statistics)
    save_results(
        args.output,
        {
            "config": str(args.config),
            "strategy": strategy.name,
            "queue": queue.metadata.model_dump(),
            "statistics": statistics.to_dict(),
        },
    )
    if args.output:
        print(f"Saved results to {args.output}")
    return 0


def command_generate_queue(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    queue = ArrivalQueue.generate(config)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    queue.save(args.output)
    print(f"Generated {len(queue)} arrivals (seed {queue.metadata.seed}) into {args.output}")
    return 0


def command_compare(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    names: List[str] = args.algorithm or [DEFAULT_STRATEGY]
    queue = load_queue(config, args.queue)
    results = compare_strategies(config, names, queue=queue)
    for name, statistics in results.items():
        print(f"\n== {name} ==")
        print_statistics(statistics)
    save_results(args.output, {name: stats.to_dict() for name, stats in results.items()})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one simulation")
    run_parser.add_argument("config", type=Path, help="Path to a TOML configuration file")
    run_parser.add_argument(
        "--algorithm",
        default=DEFAULT_STRATEGY,
        help="Registered strategy name, or path.py[:ClassName] of a strategy file",
    )
    run_parser.add_argument("--queue", type=Path, help="Replay arrivals from a saved queue file")
    run_parser.add_argument("--output", type=Path, help="Optional file path to write results as JSON")
    run_parser.set_defaults(handler=command_run)

    queue_parser = subparsers.add_parser("generate-queue", help="Generate and save an arrival queue")
    queue_parser.add_argument("config", type=Path, help="Path to a TOML configuration file")
    queue_parser.add_argument("output", type=Path, help="Where to write the queue JSON")
    queue_parser.set_defaults(handler=command_generate_queue)

    compare_parser = subparsers.add_parser("compare", help="Run several strategies on the same arrivals")
    compare_parser.add_argument("config", type=Path, help="Path to a TOML configuration file")
    compare_parser.add_argument(
        "--algorithm",
        action="append",
        help="Strategy to include; repeat for each strategy",
    )
    compare_parser.add_argument("--queue", type=Path, help="Replay arrivals from a saved queue file")
    compare_parser.add_argument("--output", type=Path, help="Optional file path to write results as JSON")
    compare_parser.set_defaults(handler=command_compare)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.handler(args)
    except (ConfigurationError, InvalidFloorError, QueueFileError, StrategyLoadError) as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
