import argparse
import logging
from dataclasses import replace
from pathlib import Path
import sys

# Allow running without installing the package.
sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from experiment import goodness_of_fit, run_experiment
from io_utils import load_params, validate_params
from report import render_report


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Simulate visits to state 1 of an absorbing two-state renewal process "
        "and compare them with the analytical distribution."
    )
    parser.add_argument(
        "--params",
        type=Path,
        default=Path("input_parameters") / "model_parameters.json",
        help="Path to model_parameters.json.",
    )
    parser.add_argument(
        "--trials",
        type=int,
        default=None,
        help="Override simulation_trials from the parameter file.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override random_seed from the parameter file.",
    )
    parser.add_argument(
        "--streams",
        type=int,
        default=None,
        help="Override n_streams (independent random streams) from the parameter file.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging verbosity.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = validate_params(load_params(str(args.params)))

    overrides = {}
    if args.trials is not None:
        overrides["trials"] = args.trials
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.streams is not None:
        overrides["n_streams"] = args.streams
    if overrides:
        config = replace(config, **overrides)

    result = run_experiment(config)
    print(render_report(result, goodness_of_fit(result)))


if __name__ == "__main__":
    main()
