"""Pydantic models for the test execution service API."""

from collections.abc import Sequence

from pydantic import BaseModel, Field

from wpt_orchestrator.models.result import HarnessStatus, TestCaseResult, TestResult


class CaseResponse(BaseModel):
    """A subtest outcome returned by the service."""

    name: str
    passed: bool
    status: int
    message: str | None = None
    stack: str | None = None


class HarnessStatusResponse(BaseModel):
    """Harness status returned by the service."""

    status: int
    message: str | None = None


class RunResponse(BaseModel):
    """Response from the run endpoint."""

    status: int
    harness_status: HarnessStatusResponse | None = None
    cases: Sequence[CaseResponse] = Field(default_factory=list)
    stderr: str = ""
    duration: float | None = None

    def to_result(self, elapsed: float) -> TestResult:
        """Convert to a test result, using ``elapsed`` when no duration was sent."""
        harness_status = (
            None
            if self.harness_status is None
            else HarnessStatus(
                status=self.harness_status.status,
                message=self.harness_status.message,
            )
        )
        return TestResult(
            status=self.status,
            harness_status=harness_status,
            cases=[
                TestCaseResult(
                    name=case.name,
                    passed=case.passed,
                    status=case.status,
                    message=case.message,
                    stack=case.stack,
                )
                for case in self.cases
            ],
            stderr=self.stderr,
            duration=self.duration if self.duration is not None else elapsed,
        )
