"""Messages streamed by a test command on its stdout."""

import json
import logging

from pydantic import BaseModel, ValidationError

from wpt_orchestrator.models.result import HarnessStatus, TestCaseResult

log = logging.getLogger(__name__)


class CaseMessage(BaseModel):
    """Outcome of one subtest."""

    name: str
    passed: bool
    status: int
    message: str | None = None
    stack: str | None = None


class HarnessStatusMessage(BaseModel):
    """Final harness status of the test file."""

    status: int
    message: str | None = None


class RunnerMessage(BaseModel):
    """One line of runner output: a subtest result or the harness status."""

    case: CaseMessage | None = None
    harness_status: HarnessStatusMessage | None = None


def parse_message(line: str) -> RunnerMessage | None:
    """Parse a stdout line, returning None for plain console output."""
    line = line.strip()
    if not line.startswith("{"):
        return None
    try:
        return RunnerMessage.model_validate(json.loads(line))
    except (json.JSONDecodeError, ValidationError):
        log.debug("Ignoring unrecognized runner output: %s", line)
        return None


def to_case_result(message: CaseMessage) -> TestCaseResult:
    """Convert a streamed subtest message into a case result."""
    return TestCaseResult(
        name=message.name,
        passed=message.passed,
        status=message.status,
        message=message.message,
        stack=message.stack,
    )


def to_harness_status(message: HarnessStatusMessage) -> HarnessStatus:
    """Convert a streamed harness status message."""
    return HarnessStatus(status=message.status, message=message.message)
