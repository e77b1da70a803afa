"""Command-line entry point for running and exporting simulations."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Optional, Sequence

from placement.domain.constraints import SimulationConfig
from placement.domain.models import SimulationOutput
from placement.domain.params import SimulationConfigParams
from placement.services.export_service import export_simulation
from placement.services.simulation_service import SimulationService, SimulationValidationError
from placement.utils.config import get_settings
from placement.utils.logger import configure_logging, get_logger


logger = get_logger(__name__)

CONFIG_FLAGS = (
    "seed",
    "candidate_count",
    "department_count",
    "min_capacity",
    "max_capacity",
    "preference_length",
    "popularity_skew",
    "aptitude_weight",
    "constraint_rate",
)

SEPARATOR_LINE = "=" * 60


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compare department-greedy and deferred-acceptance placement on a synthetic population",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    for name in CONFIG_FLAGS:
        # Raw strings; out-of-range or unparseable values fall back during normalization.
        parser.add_argument(f"--{name.replace('_', '-')}", dest=name, default=None)
    parser.add_argument(
        "--sweep-seeds",
        type=int,
        nargs="+",
        default=None,
        help="Run one simulation per seed and print a summary row for each",
    )
    parser.add_argument(
        "--export-dir",
        type=Path,
        default=None,
        help="Write assignments/departments/metrics CSV files to this directory",
    )
    parser.add_argument(
        "--export",
        action="store_true",
        help="Write CSV files to PLACEMENT_EXPORT_DIR (ignored when --export-dir is given)",
    )
    parser.add_argument("--json", action="store_true", help="Print machine-readable output")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Logging verbosity (defaults to PLACEMENT_LOG_LEVEL)",
    )
    return parser


def _print_summary(config: SimulationConfig, output: SimulationOutput) -> None:
    print(SEPARATOR_LINE)
    print(f"  seed={config.seed} candidates={config.candidate_count} "
          f"departments={config.department_count}")
    print(SEPARATOR_LINE)
    for result in output.results():
        metrics = result.metrics
        print(
            f"  {result.algorithm:<20} first={metrics.first_choice_rate * 100:5.1f}% "
            f"top3={metrics.top3_rate * 100:5.1f}% avg_rank={metrics.average_rank:.2f} "
            f"blocking_pairs={metrics.blocking_pairs}"
        )
        print("    " + " | ".join(f"{bin_.label}: {bin_.value}" for bin_ in result.histogram))


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    params = SimulationConfigParams(**{name: getattr(args, name) for name in CONFIG_FLAGS})
    config = params.to_config()
    settings = get_settings()
    service = SimulationService(settings=settings)
    logger.debug("CLI invoked | args=%s", vars(args))

    if args.sweep_seeds:
        try:
            rows = service.run_seed_sweep(args.sweep_seeds, overrides=config)
        except SimulationValidationError as exc:
            logger.error("Seed sweep rejected | reason=%s", exc)
            return 2
        if args.json:
            print(json.dumps(rows, indent=2))
        else:
            for row in rows:
                print(
                    f"seed={row['seed']} "
                    f"baseline_blocking_pairs={row['baseline_blocking_pairs']} "
                    f"da_first_choice_rate={row['deferred_acceptance_first_choice_rate']:.3f} "
                    f"baseline_first_choice_rate={row['baseline_first_choice_rate']:.3f}"
                )
        return 0

    output = service.run_simulation(config)
    if args.json:
        payload = {
            "config": config.to_api_dict(),
            "baseline": output.baseline.to_api_dict(),
            "deferred_acceptance": output.deferred_acceptance.to_api_dict(),
            "comparison": service.compare_results(output),
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        _print_summary(config, output)

    export_dir = args.export_dir
    if export_dir is None and args.export:
        export_dir = settings.export_directory
    if export_dir is not None:
        written = export_simulation(output, export_dir)
        if not args.json:
            for path in written.values():
                print(f"  wrote {path}")
    return 0
