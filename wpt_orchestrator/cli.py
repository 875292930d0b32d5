"""CLI entry point for the conformance test orchestrator."""

import argparse
import asyncio
import json
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

from wpt_orchestrator.analysis import TestRun, summarize_run
from wpt_orchestrator.config import OrchestratorConfig
from wpt_orchestrator.discovery import (
    assert_all_expectations_have_tests,
    discover_tests,
    discover_tests_for_update,
)
from wpt_orchestrator.environment import check_environment
from wpt_orchestrator.errors import ConfigurationError, MissingTestsError
from wpt_orchestrator.models.test import TestToRun
from wpt_orchestrator.orchestrator import TestOrchestrator
from wpt_orchestrator.reporting import (
    build_json_summary,
    build_update_dump,
    build_wpt_report,
    console,
    generate_run_info,
    report_final,
)
from wpt_orchestrator.runners.loading import available_runners, load_runner_manifest
from wpt_orchestrator.store import (
    load_expectation,
    load_manifest,
    save_expectation,
    write_json,
)
from wpt_orchestrator.updater import update_expectations

log = logging.getLogger("wpt_orchestrator")


def now_ms() -> int:
    """Wall clock time in milliseconds, as used in wptreport documents."""
    return int(time.time() * 1000)


async def execute_tests(
    config: OrchestratorConfig, tests: Sequence[TestToRun]
) -> list[TestRun]:
    """Run ``tests`` with the runner selected in ``config``."""
    log.info("Loading runner: %s", config.runner)
    manifest = load_runner_manifest(config.runner)
    async with manifest.open(config.runner_config) as runner:
        orchestrator = TestOrchestrator(
            runner=runner,
            timeouts=config.timeouts,
            concurrency=config.concurrency,
            quiet=config.quiet,
        )
        return await orchestrator.run_tests(tests)


async def run(config: OrchestratorConfig) -> int:
    """Run tests against the baseline and return the exit code."""
    filters = list(config.filters) or None
    manifest = load_manifest(config.manifest_path)

    try:
        expectation = load_expectation(config.expectation_path)
        tests = discover_tests(
            manifest, expectation, filters, no_ignore=config.no_ignore
        )
        assert_all_expectations_have_tests(
            expectation, tests, filters, no_ignore=config.no_ignore
        )
    except MissingTestsError as e:
        log.error(
            "Following tests are missing in manifest, but are present in "
            "expectations:"
        )
        for path in e.missing:
            log.error("  %s", path)
        return 1
    except ConfigurationError as e:
        log.error("Invalid expectations: %s", e)
        return 1

    log.info("Going to run %d test files.", len(tests))
    time_start = now_ms()
    results = await execute_tests(config, tests)
    time_end = now_ms()

    if config.json_path:
        write_json(config.json_path, build_json_summary(results))
    if config.wptreport_path:
        report = build_wpt_report(
            results, time_start, time_end, generate_run_info(config.runner)
        )
        write_json(config.wptreport_path, report)

    summary = summarize_run(results)
    report_final(summary)
    return summary.exit_code


async def update(config: OrchestratorConfig) -> int:
    """Run every test and rewrite the baseline to match the outcomes."""
    filters = list(config.filters) or None
    manifest = load_manifest(config.manifest_path)

    try:
        baseline = load_expectation(config.expectation_path)
    except ConfigurationError as e:
        log.error("Invalid expectations: %s", e)
        return 1

    tests = discover_tests_for_update(
        manifest, baseline, filters, no_ignore=config.no_ignore
    )
    log.info("Going to run %d test files.", len(tests))
    results = await execute_tests(config, tests)

    if config.json_path:
        write_json(config.json_path, build_update_dump(results))

    save_expectation(config.expectation_path, update_expectations(baseline, results))
    report_final(summarize_run(results))
    console.info("Updated %s to match reality.", config.expectation_path.name)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all commands."""
    parser = argparse.ArgumentParser(
        description="Run conformance tests against an expectation baseline"
    )
    commands = parser.add_subparsers(dest="command", required=True)
    runner_keys = ", ".join(available_runners())

    commands.add_parser(
        "setup",
        help="Validate that the environment is configured correctly",
    )

    for name, help_text in (
        ("run", "Run all tests like specified in the expectation file"),
        ("update", "Update the expectation file to match the current reality"),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument(
            "filters",
            nargs="*",
            help="Only run tests whose path starts with one of these prefixes",
        )
        command.add_argument(
            "--manifest",
            type=Path,
            default=Path("wpt/MANIFEST.json"),
            help="Path to the test manifest",
        )
        command.add_argument(
            "--expectation",
            type=Path,
            default=Path("wpt/expectation.json"),
            help="Path to the expectation baseline",
        )
        command.add_argument(
            "--runner",
            required=True,
            help=f"Runner key ({runner_keys})",
        )
        command.add_argument(
            "--runner-config",
            default="{}",
            help="JSON configuration for the runner",
        )
        command.add_argument(
            "--json",
            type=Path,
            help="Write a machine-readable summary to this file",
        )
        command.add_argument(
            "--wptreport",
            type=Path,
            help="Write a wptreport JSON file",
        )
        command.add_argument(
            "--no-ignore",
            action="store_true",
            help="Also run tests marked as ignored in the expectation file",
        )
        command.add_argument(
            "--quiet",
            action="store_true",
            help="Don't print passing subtests",
        )
        command.add_argument(
            "--concurrency",
            type=int,
            help="Number of buckets to run in parallel (default: CPU count)",
        )

    return parser


def config_from_args(args: argparse.Namespace) -> OrchestratorConfig:
    """Collect parsed arguments into an orchestrator configuration."""
    options = {
        "manifest_path": args.manifest,
        "expectation_path": args.expectation,
        "runner": args.runner,
        "runner_config": json.loads(args.runner_config),
        "filters": args.filters,
        "json_path": args.json,
        "wptreport_path": args.wptreport,
        "no_ignore": args.no_ignore,
        "quiet": args.quiet,
    }
    if args.concurrency is not None:
        options["concurrency"] = args.concurrency
    return OrchestratorConfig(**options)


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if args.command == "setup":
        sys.exit(check_environment())

    config = config_from_args(args)
    command = run if args.command == "run" else update
    sys.exit(asyncio.run(command(config)))


if __name__ == "__main__":  # pragma: no cover
    main()
