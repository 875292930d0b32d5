"""Abstract base class for runners executing tests in the runtime under test."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from yarl import URL

from wpt_orchestrator.models.manifest import ManifestTestOptions
from wpt_orchestrator.models.result import TestCaseResult, TestResult, Timeouts

type CaseReporter = Callable[[TestCaseResult], None]


def ignore_case(case: TestCaseResult) -> None:
    """Case reporter that drops progress updates."""


@dataclass(frozen=True, kw_only=True)
class TestRunner(ABC):
    """Executes one test file inside the runtime under test.

    Runners never raise for a test that timed out: they return a result with
    ``status`` set to ``TIMEOUT_STATUS`` instead.
    """

    __test__ = False

    @abstractmethod
    async def run_single_test(
        self,
        url: URL,
        options: ManifestTestOptions,
        report_case: CaseReporter,
        timeouts: Timeouts,
    ) -> TestResult:
        """Run the test file at ``url`` and return its structured result.

        Args:
            url: Resolved URL of the test file
            options: Options of the manifest variation
            report_case: Called once per subtest as soon as it completes
            timeouts: Timeout pair; the long value applies to long tests

        Returns:
            Result of the test file, one case per subtest

        """
