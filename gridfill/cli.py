"""
gridfill/cli.py — Command-line entry point.

  gridfill jobs.json [--job NAME ...] [--log-level LEVEL]

Loads a JSON job file, runs the selected jobs with batch.run_all and prints
one line per step. Exit status is 0 when every job succeeded, 1 otherwise.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .batch import run_all
from .errors import AppError, friendly_message
from .logs import configure_logging
from .models import StepResult
from .project import JobsConfig

logger = logging.getLogger(__name__)


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gridfill",
        description="Fill xlsx templates from the jobs in a JSON job file",
    )
    parser.add_argument("job_file", help="JSON job file")
    parser.add_argument(
        "--job", "-j", action="append", default=[],
        help="run only the named job (repeatable)",
    )
    parser.add_argument("--log-level", help="logging level (default: GRIDFILL_LOG_LEVEL or WARNING)")
    return parser


def _print_result(result: StepResult) -> None:
    if result.error_code:
        err = AppError(result.error_code, result.error_message or "", result.error_details)
        print(f"[{result.job_name}] FAILED: {friendly_message(err)}")
    else:
        print(f"[{result.job_name}] {result.message}")


def main(argv: Optional[List[str]] = None) -> int:
    args = create_argument_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = JobsConfig.load_json(args.job_file)
    except AppError as e:
        print(friendly_message(e), file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Could not read job file {args.job_file}: {e}", file=sys.stderr)
        return 1

    jobs = config.build_run_items()
    if args.job:
        jobs = [j for j in jobs if j.name in args.job]
    if not jobs:
        print("No jobs to run.", file=sys.stderr)
        return 1

    def on_progress(event: str, payload) -> None:
        if event in ("result", "error"):
            _print_result(payload)

    report = run_all(jobs, on_progress=on_progress)
    for path in report.saved_paths:
        print(f"saved {path}")
    logger.info("run finished: ok=%s", report.ok)
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
