"""Recompute the expectation baseline from a run's outcomes."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from wpt_orchestrator.analysis import TestRun
from wpt_orchestrator.models.expectation import (
    FAIL,
    PASS,
    Expectation,
    FailingCases,
    IgnoreMarker,
    Leaf,
    Node,
    insert,
)

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class FileOutcome:
    """Subtest names split by outcome for one test file."""

    passed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    test_succeeded: bool


def collect_file_outcomes(results: Sequence[TestRun]) -> dict[str, FileOutcome]:
    """Group subtest outcomes by test path, keeping subtest order."""
    outcomes: dict[str, FileOutcome] = {}
    for test, result in results:
        outcome = outcomes.setdefault(
            test.path, FileOutcome(test_succeeded=result.succeeded)
        )
        for case in result.cases:
            if case.passed:
                outcome.passed.append(case.name)
            else:
                outcome.failed.append(case.name)
    return outcomes


def compute_expectation(outcome: FileOutcome) -> Leaf:
    """Return the expectation matching a file's observed outcome."""
    if outcome.test_succeeded and not outcome.failed:
        return PASS
    if outcome.test_succeeded and outcome.passed:
        return FailingCases(names=tuple(outcome.failed))
    return FAIL


def _entry_at(tree: Node, segments: Sequence[str]) -> Expectation | None:
    current: Expectation = tree
    for segment in segments:
        if not isinstance(current, Node):
            return None
        child = current.children.get(segment)
        if child is None:
            return None
        current = child
    return current


def update_expectations(baseline: Node, results: Sequence[TestRun]) -> Node:
    """Return ``baseline`` with every run file set to its observed outcome.

    Ignore markers keep their flag and record the new outcome inside them.
    Applying the same results twice yields the same tree.
    """
    outcomes = collect_file_outcomes(results)
    tree = baseline
    for path, outcome in outcomes.items():
        segments = path[1:].split("/")
        value: Leaf | IgnoreMarker = compute_expectation(outcome)
        existing = _entry_at(tree, segments)
        if isinstance(existing, IgnoreMarker):
            value = IgnoreMarker(ignore=existing.ignore, expectation=value)
        tree = insert(tree, segments, value)
    log.info("Updated expectations for %d test file(s)", len(outcomes))
    return tree
