"""
Command line entry point.

    epidemic-sim model.txt [--seed N] [--output daily.csv] [--progress]

The daily CSV report goes to stdout; log messages go to stderr.
"""

import argparse
import logging
import sys
from typing import List, Optional

from core.simulator import SimulationConfig, Simulator
from modelfile.errors import ModelDescriptionError
from modelfile.parser import load_model

logger = logging.getLogger("epidemic")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="epidemic-sim",
        description="Simulate an epidemic spreading through a population described by a model file."
    )
    parser.add_argument("model", help="model description file")
    parser.add_argument("--seed", type=int, default=None,
                        help="random seed (default: unseeded)")
    parser.add_argument("--no-headline", action="store_true",
                        help="omit the CSV header line")
    parser.add_argument("--output", default=None,
                        help="also write the daily statistics to this CSV file")
    parser.add_argument("--bedridden-own-recovery", action="store_true",
                        help="decide bedridden recovery with the bedridden rule "
                             "instead of the symptomatic one")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None, help="also log to this file")
    parser.add_argument("--progress", action="store_true", help="show a progress bar")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        model = load_model(args.model)
    except FileNotFoundError:
        logger.error(f"could not open file: {args.model}")
        return 1
    except ModelDescriptionError as e:
        logger.error(str(e))
        return 1

    config = SimulationConfig(
        random_seed=args.seed,
        bedridden_uses_own_recovery=args.bedridden_own_recovery,
        headline=not args.no_headline,
        progress_bar=args.progress,
        log_level=args.log_level,
        log_file=args.log_file,
        export_log=args.log_file is not None
    )
    simulator = Simulator(config, model)
    results = simulator.run()

    if args.output:
        simulator.reporter.export_csv(args.output)
    logger.info(results.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
