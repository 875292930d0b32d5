"""Models for test execution results."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum

from wpt_orchestrator.models.manifest import ManifestTestOptions

# Process status reported by runners when a test exceeded its timeout.
TIMEOUT_STATUS = 124


class CaseStatus(IntEnum):
    """Subtest status codes as reported by testharness.js."""

    PASS = 0
    FAIL = 1
    TIMEOUT = 2
    NOTRUN = 3


@dataclass(frozen=True, kw_only=True)
class TestCaseResult:
    """Outcome of one named subtest inside a test file."""

    __test__ = False

    name: str
    passed: bool
    status: int
    message: str | None = None
    stack: str | None = None


@dataclass(frozen=True, kw_only=True)
class HarnessStatus:
    """Summary reported by the harness running inside the runtime under test."""

    status: int
    message: str | None = None


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Result of executing one test file.

    ``harness_status`` is None when the harness never reported, which with a
    clean exit ``status`` means the event loop ran out of tasks.
    """

    __test__ = False

    status: int
    harness_status: HarnessStatus | None
    cases: Sequence[TestCaseResult]
    stderr: str = ""
    duration: float = 0.0

    @property
    def succeeded(self) -> bool:
        """Whether the file ran to completion and the harness reported."""
        return self.status == 0 and self.harness_status is not None

    @property
    def timed_out(self) -> bool:
        """Whether the runner gave up on the file after its timeout."""
        return self.status == TIMEOUT_STATUS


@dataclass(frozen=True, kw_only=True)
class Timeouts:
    """Per-test timeouts in seconds."""

    long: float
    default: float

    @classmethod
    def for_environment(cls, *, ci: bool) -> "Timeouts":
        """Timeouts used locally, raised to the long value on CI."""
        if ci:
            return cls(long=240.0, default=240.0)
        return cls(long=60.0, default=10.0)

    def for_options(self, options: ManifestTestOptions) -> float:
        """Return the timeout that applies to a test with these options."""
        return self.long if options.is_long else self.default
