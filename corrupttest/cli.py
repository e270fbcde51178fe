"""
Command line entry point.

Usage:
    corrupttest run -w double -m ON -a strict -l 100
    corrupttest compare summary.csv baseline.csv
    corrupttest workloads
"""

import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from corrupttest.aggregator import aggregate, format_summary
from corrupttest.config import AssertionLevel, Settings, get_settings
from corrupttest.database import MySQLPool
from corrupttest.domain import AVAILABLE_INJECTIONS
from corrupttest.errors import SetupError, UnknownWorkloadError
from corrupttest.failpoint import FailpointController
from corrupttest.logging import clear_run_id, get_logger, set_run_id, setup_logging
from corrupttest.report import compare_to_baseline, load_summary, summary_frame, write_summary_csv
from corrupttest.runner import HarnessRunner
from corrupttest.runtime.results import ResultStore
from corrupttest.runtime.run_context import RunContext
from corrupttest.workload.registry import get_workload, list_workloads

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def parse_switch(value: str) -> bool:
    """Accept ON/OFF, 1/0, true/false for the mutation checker."""
    lowered = value.strip().lower()
    if lowered in {"on", "1", "true", "yes"}:
        return True
    if lowered in {"off", "0", "false", "no"}:
        return False
    raise argparse.ArgumentTypeError(f"expected ON or OFF, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="corrupttest",
        description="Inject mutation corruption and check the database notices",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a workload over the schema space")
    run.add_argument("-w", "--workload", help="Workload name (single, double, t2, t3, t4)")
    run.add_argument(
        "-m", "--mutation-checker", type=parse_switch, help="Mutation checker ON or OFF"
    )
    run.add_argument(
        "-a",
        "--assertion",
        choices=[level.value for level in AssertionLevel],
        help="Assertion level",
    )
    run.add_argument("-l", "--limit", type=int, help="Maximum number of tables")
    run.add_argument("--database-url", help="Database URI, e.g. mysql://root@127.0.0.1:4000/test")
    run.add_argument("--status-address", help="host:port of the failpoint endpoint")
    run.add_argument("--log-file", type=Path, help="Also write logs to this file")
    run.add_argument("--workers", type=int, help="Concurrent workers")
    run.add_argument("--summary-csv", type=Path, help="Write the summary table here")

    compare = sub.add_parser("compare", help="Compare a summary CSV against a baseline")
    compare.add_argument("current", help="Current summary CSV")
    compare.add_argument("baseline", help="Baseline summary CSV (path or http(s) URL)")
    compare.add_argument(
        "--tolerance", type=float, default=0.0, help="Allowed success ratio change"
    )

    sub.add_parser("workloads", help="List available workloads")
    return parser


def settings_from_args(args: argparse.Namespace, base: Settings | None = None) -> Settings:
    """Overlay command line flags on environment settings."""
    base = base or get_settings()
    overrides: dict[str, Any] = {
        "workload": args.workload,
        "mutation_checker": args.mutation_checker,
        "assertion": args.assertion,
        "limit": args.limit,
        "database_url": args.database_url,
        "status_address": args.status_address,
        "log_file": args.log_file,
        "workers": args.workers,
        "summary_csv": args.summary_csv,
    }
    data = base.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)


def report_results(settings: Settings, results: ResultStore) -> None:
    counts = aggregate(results, AVAILABLE_INJECTIONS)
    for line in format_summary(counts):
        logger.info(line)
    if settings.summary_csv is not None:
        frame = summary_frame(
            counts,
            workload=settings.workload,
            mutation_checker=settings.mutation_checker_value,
            assertion=settings.assertion.value,
        )
        write_summary_csv(frame, settings.summary_csv)


async def run_harness(settings: Settings, context: RunContext) -> ResultStore:
    """Open the pool and failpoint client, run, and always release both."""
    pool = MySQLPool(settings.database_url, max_size=settings.workers)
    failpoints = FailpointController(
        settings.status_address,
        context.metrics,
        timeout=settings.failpoint_timeout_s,
    )
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal, context)
        except (NotImplementedError, RuntimeError):
            # add_signal_handler is unavailable on some platforms
            pass
    try:
        runner = HarnessRunner(settings, pool, failpoints, context)
        return await runner.run()
    finally:
        await failpoints.close()
        await pool.close()


def _on_signal(context: RunContext) -> None:
    logger.warning("Interrupt received; finishing in-flight tables before exiting")
    context.request_stop()


def cmd_run(args: argparse.Namespace) -> int:
    try:
        settings = settings_from_args(args)
        get_workload(settings.workload)
    except (ValidationError, UnknownWorkloadError) as e:
        print(f"invalid configuration: {e}", file=sys.stderr)
        return EXIT_USAGE

    setup_logging(settings.log_level, settings.log_file, settings.json_logs)
    context = RunContext()
    set_run_id(context.run_id)
    logger.info("config: %s", settings.get_redacted_config())
    try:
        results = asyncio.run(run_harness(settings, context))
    except SetupError as e:
        logger.critical("Fatal setup error: %s", e)
        return EXIT_FATAL
    except Exception as e:
        logger.critical("Run failed: %s", e, exc_info=True)
        return EXIT_FATAL
    finally:
        logger.info("run metrics: %s", context.to_dict())
        clear_run_id()

    report_results(settings, results)
    if context.interrupted:
        logger.warning("Run interrupted before the schema space was exhausted")
        return EXIT_INTERRUPTED
    return EXIT_OK


def cmd_compare(args: argparse.Namespace) -> int:
    current = load_summary(args.current)
    baseline = load_summary(args.baseline)
    regressions = compare_to_baseline(current, baseline, tolerance=args.tolerance)
    for regression in regressions:
        print(f"REGRESSION {regression.describe()}")
    if regressions:
        return EXIT_FATAL
    print("no regressions")
    return EXIT_OK


def cmd_workloads(args: argparse.Namespace) -> int:
    for info in list_workloads():
        print(f"{info['name']:8} {info['description']}")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "run":
        return cmd_run(args)
    if args.command == "compare":
        return cmd_compare(args)
    return cmd_workloads(args)


if __name__ == "__main__":
    sys.exit(main())
