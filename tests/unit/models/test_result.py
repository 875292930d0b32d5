"""Tests for result models."""

from wpt_orchestrator.models.manifest import ManifestTestOptions
from wpt_orchestrator.models.result import TIMEOUT_STATUS, Timeouts
from wpt_orchestrator.testing.factories import HarnessStatusFactory, TestResultFactory


def test_succeeded_requires_clean_exit_and_harness_status() -> None:
    """A file succeeded only with status 0 and a harness report."""
    assert TestResultFactory.build().succeeded
    assert not TestResultFactory.build(status=1).succeeded
    assert not TestResultFactory.build(harness_status=None).succeeded


def test_harness_error_still_counts_as_succeeded() -> None:
    """A harness that reported an error still completed the file."""
    result = TestResultFactory.build(
        harness_status=HarnessStatusFactory.build(status=1, message="boom")
    )

    assert result.succeeded


def test_timed_out() -> None:
    """The timeout status marks a timed-out file."""
    assert TestResultFactory.build(status=TIMEOUT_STATUS).timed_out
    assert not TestResultFactory.build(status=1).timed_out


class TestTimeouts:
    """Tests for Timeouts."""

    def test_local_timeouts(self) -> None:
        """Long tests get 60s locally, others 10s."""
        timeouts = Timeouts.for_environment(ci=False)

        assert timeouts.for_options(ManifestTestOptions(timeout="long")) == 60.0
        assert timeouts.for_options(ManifestTestOptions()) == 10.0

    def test_ci_raises_both_timeouts(self) -> None:
        """Both timeouts use the long value on CI."""
        timeouts = Timeouts.for_environment(ci=True)

        assert timeouts.for_options(ManifestTestOptions(timeout="long")) == 240.0
        assert timeouts.for_options(ManifestTestOptions()) == 240.0
