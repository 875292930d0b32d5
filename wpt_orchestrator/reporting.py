"""Console reports and machine-readable run reports."""

import dataclasses
import logging
import platform
import re
from collections.abc import Sequence
from typing import Any

from wpt_orchestrator.analysis import RunSummary, TestRun, analyze_test_result
from wpt_orchestrator.models.expectation import FAIL, Leaf, to_raw
from wpt_orchestrator.models.result import CaseStatus, TestCaseResult, TestResult
from wpt_orchestrator.models.test import TestToRun
from wpt_orchestrator.runners.base import CaseReporter

console = logging.getLogger("wpt_orchestrator.console")

STATUS_SYMBOLS = {
    "ok": "✅",
    "failed": "❌",
    "expected": "⚠️",
}

EVENT_LOOP_EXHAUSTED_MESSAGE = "Event loop ran out of tasks."

_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


def escape_lone_surrogates(text: str | None) -> str | None:
    """Replace unpaired UTF-16 surrogates, which JSON consumers reject."""
    if text is None:
        return None
    return _LONE_SURROGATE.sub(lambda m: f"U+{ord(m.group()):04x}", text)


def create_case_reporter(expectation: Leaf, *, quiet: bool = False) -> CaseReporter:
    """Return a reporter that logs one line per completed subtest."""

    def report_case(case: TestCaseResult) -> None:
        expect_fail = expectation.expects_failure(case.name)
        if case.status == CaseStatus.PASS:
            if expect_fail:
                outcome = "ok (expected fail)"
            elif quiet:
                return
            else:
                outcome = "ok"
        elif expect_fail:
            outcome = "failed (expected)"
        elif case.status == CaseStatus.TIMEOUT:
            outcome = "failed (timeout)"
        elif case.status == CaseStatus.NOTRUN:
            outcome = "failed (incomplete)"
        else:
            outcome = "failed"
        console.info("test %s ... %s", case.name, outcome)

    return report_case


def report_test_header(test: TestToRun) -> None:
    """Log the separator printed before a test file's output."""
    console.info("%s", "-" * 40)
    console.info("%s", test.path)


def report_file_result(result: TestResult, expectation: Leaf) -> None:
    """Log the outcome of one test file against its expectation."""
    if not result.succeeded:
        console.info("test stderr:\n%s", result.stderr)
        if result.timed_out:
            reason = "runner timed out during test"
        elif result.status != 0:
            reason = "runner failed during test"
        else:
            reason = "the event loop ran out of tasks during the test"
        if expectation == FAIL:
            symbol, outcome = STATUS_SYMBOLS["expected"], "failed (expected)"
        else:
            symbol, outcome = STATUS_SYMBOLS["failed"], "failed"
        console.info("file result: %s %s. %s", symbol, outcome, reason)
        return

    analysis = analyze_test_result(result, expectation)

    for case in analysis.failed:
        console.info("%s\n%s\n%s", case.name, case.message or "", case.stack or "")
    if analysis.failed_count > 0:
        console.info("failures:")
    for case in analysis.failed:
        console.info('        "%s"', case.name)
    if analysis.expected_failed_but_passed_count > 0:
        console.info("expected failures that passed:")
    for case in analysis.expected_failed_but_passed:
        console.info('        "%s"', case.name)

    symbol = STATUS_SYMBOLS["failed" if analysis.failed_count > 0 else "ok"]
    console.info(
        "file result: %s %s. %d passed; %d failed; %d expected failure; total %d",
        symbol,
        "failed" if analysis.failed_count > 0 else "ok",
        analysis.passed_count,
        analysis.failed_count,
        analysis.expected_failed_and_failed_count,
        analysis.total_count,
    )


def report_final(summary: RunSummary) -> None:
    """Log the run summary, naming every offending file and subtest."""
    console.info("%s", "=" * 40)

    if summary.failed_cases:
        console.info("failures:")
    for path, case in summary.failed_cases:
        console.info('        "%s - %s"', path, case.name)
    if summary.failed_files:
        console.info("file failures:")
    for path in summary.failed_files:
        console.info('        "%s"', path)
    if summary.expected_failed_but_passed_cases:
        console.info("expected test failures that passed:")
    for path, case in summary.expected_failed_but_passed_cases:
        console.info('        "%s - %s"', path, case.name)
    if summary.expected_failed_but_passed_files:
        console.info("expected file failures that passed:")
    for path in summary.expected_failed_but_passed_files:
        console.info('        "%s"', path)

    console.info(
        "final result: %s %s. %d passed; %d failed; %d expected failure; total %d",
        STATUS_SYMBOLS["failed" if summary.failed else "ok"],
        "failed" if summary.failed else "ok",
        summary.passed_count,
        summary.failed_count,
        summary.expected_failed_and_failed_count,
        summary.total_count,
    )


def file_status(result: TestResult) -> str:
    """File-level status in wptreport terms."""
    if result.status != 0:
        return "CRASH"
    if result.harness_status is not None and result.harness_status.status == 0:
        return "OK"
    return "ERROR"


def file_message(result: TestResult) -> str | None:
    """Overall message: harness message, else trimmed stderr."""
    # Stderr says nothing useful when the only problem is that the event
    # loop ran dry before the harness reported.
    if result.harness_status is None and result.status == 0:
        return EVENT_LOOP_EXHAUSTED_MESSAGE
    harness_message = result.harness_status and result.harness_status.message
    if harness_message is not None:
        return harness_message
    return result.stderr.strip() or None


def generate_run_info(product: str) -> dict[str, Any]:
    """Describe the machine and product the run was made with."""
    return {
        "product": product,
        "os": platform.system().lower(),
        "os_version": platform.release(),
        "processor": platform.machine(),
        "version": "unknown",
        "python_version": platform.python_version(),
    }


def build_wpt_report(
    results: Sequence[TestRun],
    time_start: int,
    time_end: int,
    run_info: dict[str, Any],
) -> dict[str, Any]:
    """Build a wptreport document for the run."""
    report_results: list[dict[str, Any]] = []
    for test, result in results:
        subtests: list[dict[str, Any]] = []
        for case in result.cases:
            subtest: dict[str, Any] = {
                "name": escape_lone_surrogates(case.name),
                "status": "PASS" if case.passed else "FAIL",
                "message": escape_lone_surrogates(case.message),
                "known_intermittent": [],
            }
            if not case.passed:
                subtest["expected"] = (
                    "FAIL" if test.expectation.expects_failure(case.name) else "PASS"
                )
            subtests.append(subtest)

        status = file_status(result)
        report_result: dict[str, Any] = {
            "test": test.report_name,
            "subtests": subtests,
            "status": status,
            "message": escape_lone_surrogates(file_message(result)),
            "duration": result.duration,
            "known_intermittent": [],
        }
        if status != "OK":
            report_result["expected"] = "OK"
        report_results.append(report_result)

    return {
        "run_info": run_info,
        "time_start": time_start,
        "time_end": time_end,
        "results": report_results,
    }


def build_json_summary(results: Sequence[TestRun]) -> list[dict[str, Any]]:
    """Minified per-file summary written by ``run --json``."""
    return [
        {
            "file": test.path,
            "name": test.options.title,
            "cases": [
                {"name": case.name, "passed": case.passed} for case in result.cases
            ],
        }
        for test, result in results
    ]


def build_update_dump(results: Sequence[TestRun]) -> list[dict[str, Any]]:
    """Full test and result listing written by ``update --json``."""
    return [
        {
            "test": {
                "path": test.path,
                "url": str(test.url),
                "options": test.options.model_dump(mode="json", exclude_none=True),
                "expectation": to_raw(test.expectation),
            },
            "result": dataclasses.asdict(result),
        }
        for test, result in results
    ]
