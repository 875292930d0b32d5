"""Classify test outcomes against their declared expectations."""

from collections.abc import Sequence
from dataclasses import dataclass

from wpt_orchestrator.models.expectation import FAIL, Leaf
from wpt_orchestrator.models.result import TestCaseResult, TestResult
from wpt_orchestrator.models.test import TestToRun

type TestRun = tuple[TestToRun, TestResult]


@dataclass(frozen=True, kw_only=True)
class CaseAnalysis:
    """Subtest classification for one test file.

    ``failed_count`` folds in genuine failures and expected failures that
    passed, since both mean the baseline needs attention.
    """

    failed: Sequence[TestCaseResult]
    failed_count: int
    passed_count: int
    total_count: int
    expected_failed_but_passed: Sequence[TestCaseResult]
    expected_failed_and_failed_count: int

    @property
    def expected_failed_but_passed_count(self) -> int:
        """Number of subtests expected to fail that passed."""
        return len(self.expected_failed_but_passed)


def analyze_test_result(result: TestResult, expectation: Leaf) -> CaseAnalysis:
    """Classify every subtest of ``result`` against ``expectation``."""
    failed: list[TestCaseResult] = []
    expected_failed_but_passed: list[TestCaseResult] = []
    expected_failed_and_failed_count = 0

    for case in result.cases:
        expect_fail = expectation.expects_failure(case.name)
        if case.passed and expect_fail:
            expected_failed_but_passed.append(case)
        elif not case.passed and not expect_fail:
            failed.append(case)
        elif not case.passed:
            expected_failed_and_failed_count += 1

    total_count = len(result.cases)
    failed_count = len(failed) + len(expected_failed_but_passed)
    return CaseAnalysis(
        failed=failed,
        failed_count=failed_count,
        passed_count=total_count - failed_count - expected_failed_and_failed_count,
        total_count=total_count,
        expected_failed_but_passed=expected_failed_but_passed,
        expected_failed_and_failed_count=expected_failed_and_failed_count,
    )


@dataclass(frozen=True, kw_only=True)
class RunSummary:
    """Per-file outcome counts and the offending files and subtests of a run."""

    total_count: int
    failed_count: int
    expected_failed_and_failed_count: int
    failed_cases: Sequence[tuple[str, TestCaseResult]]
    failed_files: Sequence[str]
    expected_failed_but_passed_cases: Sequence[tuple[str, TestCaseResult]]
    expected_failed_but_passed_files: Sequence[str]

    @property
    def passed_count(self) -> int:
        """Files that matched their expectation, expected failures included."""
        return self.total_count - self.failed_count

    @property
    def failed(self) -> bool:
        """Whether the run diverged from the baseline."""
        return self.failed_count > 0 or bool(self.expected_failed_but_passed_files)

    @property
    def exit_code(self) -> int:
        """Process exit status for the run."""
        return 1 if self.failed else 0


def summarize_run(results: Sequence[TestRun]) -> RunSummary:
    """Aggregate file-level outcomes of a run.

    A file that crashed, timed out or never reported a harness status fails
    as a whole, unless the whole file was expected to fail.
    """
    failed_count = 0
    expected_failed_and_failed_count = 0
    failed_cases: list[tuple[str, TestCaseResult]] = []
    failed_files: list[str] = []
    expected_failed_but_passed_cases: list[tuple[str, TestCaseResult]] = []
    expected_failed_but_passed_files: list[str] = []

    for test, result in results:
        if not result.succeeded:
            if test.expectation == FAIL:
                expected_failed_and_failed_count += 1
            else:
                failed_count += 1
                failed_files.append(test.path)
            continue

        analysis = analyze_test_result(result, test.expectation)
        if (
            test.expectation == FAIL
            and result.cases
            and analysis.expected_failed_but_passed_count == analysis.total_count
        ):
            failed_count += 1
            expected_failed_but_passed_files.append(test.path)
        elif analysis.failed_count > 0:
            failed_count += 1
            failed_cases.extend((test.path, case) for case in analysis.failed)
            expected_failed_but_passed_cases.extend(
                (test.path, case) for case in analysis.expected_failed_but_passed
            )

    return RunSummary(
        total_count=len(results),
        failed_count=failed_count,
        expected_failed_and_failed_count=expected_failed_and_failed_count,
        failed_cases=failed_cases,
        failed_files=failed_files,
        expected_failed_but_passed_cases=expected_failed_but_passed_cases,
        expected_failed_but_passed_files=expected_failed_but_passed_files,
    )
