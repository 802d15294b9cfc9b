"""Command line entry point: ``python -m climate_garden --config garden.yaml``."""

import argparse
import json
from pathlib import Path
import sys
from typing import List, Optional

from .config import Config, ConfigurationError, PortfolioError
from .portfolio_strategies import PORTFOLIO_MULTIPLIERS, get_default_allocation
from .simulation import run_complete_simulation


def build_parser() -> argparse.ArgumentParser:
    """Argument parser of the command line tool."""
    parser = argparse.ArgumentParser(
        prog="climate_garden",
        description="Monte Carlo simulation of a garden plan under climate uncertainty",
    )
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument("--iterations", type=int, help="Number of Monte Carlo iterations")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible results")
    parser.add_argument(
        "--strategy",
        choices=sorted(PORTFOLIO_MULTIPLIERS),
        help="Preset portfolio used when the configuration has none",
    )
    parser.add_argument("--parallel", action="store_true", help="Run chunks on a thread pool")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("--output", type=Path, help="Write the full results as JSON")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run a simulation from the command line.

    Returns:
        Process exit code: 0 on success, 1 if the run was cut short, 2 on
        invalid configuration.
    """
    args = build_parser().parse_args(argv)

    config = Config.from_yaml(args.config) if args.config else Config()
    config.setup_logging()

    overrides = {}
    if config.simulation.portfolio is None and args.strategy:
        overrides["simulation.portfolio"] = get_default_allocation(args.strategy)
        overrides["simulation.portfolio_multiplier"] = PORTFOLIO_MULTIPLIERS[args.strategy]
    if args.parallel:
        overrides["run.parallel"] = True
    if args.progress:
        overrides["run.progress_bar"] = True
    if overrides:
        config = config.override(overrides)

    try:
        config.validate_or_raise()
        results = run_complete_simulation(config, iterations=args.iterations, seed=args.seed)
    except (ConfigurationError, PortfolioError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    print(results.summary())
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(results.to_dict(), f, indent=2, default=str)
        print(f"Results written to {args.output}")

    return 1 if results.cancelled else 0


if __name__ == "__main__":
    sys.exit(main())
