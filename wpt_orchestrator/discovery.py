"""Discover runnable tests by walking the manifest alongside the baseline."""

import logging
from collections.abc import Sequence

from yarl import URL

from wpt_orchestrator.errors import ConfigurationError, MissingTestsError
from wpt_orchestrator.models.expectation import (
    PASS,
    IgnoreMarker,
    Leaf,
    Node,
    lookup,
    resolve_child,
)
from wpt_orchestrator.models.manifest import (
    ManifestFolder,
    ManifestVariation,
    VariationList,
)
from wpt_orchestrator.models.test import TestToRun

log = logging.getLogger(__name__)

BASE_URL = URL("http://web-platform.test:8000")

TESTHARNESS_SUFFIXES = (
    ".any.html",
    ".window.html",
    ".worker.html",
    ".worker-module.html",
)

# Path fragments of tests needing server features the test server lacks:
# an HTTP/2 server, and chunked encoding for streaming request bodies.
UNSUPPORTED_PATH_MARKERS = (".h2.", "request-upload")


def matches_filters(path: str, filters: Sequence[str] | None) -> bool:
    """Return whether ``path`` (minus its leading slash) starts with a filter."""
    if not filters:
        return True
    return any(path[1:].startswith(prefix) for prefix in filters)


def may_contain_filtered(path: str, filters: Sequence[str] | None) -> bool:
    """Return whether anything below the folder ``path`` can match a filter."""
    if not filters:
        return True
    relative = path[1:]
    return any(
        relative.startswith(prefix) or prefix.startswith(relative)
        for prefix in filters
    )


def canonical_path(url: URL) -> str:
    """Path plus query string of a resolved test URL."""
    if url.raw_query_string:
        return f"{url.raw_path}?{url.raw_query_string}"
    return url.raw_path


def is_runnable(url: URL) -> bool:
    """Return whether the orchestrator can run the test at ``url``."""
    if not url.raw_path.endswith(TESTHARNESS_SUFFIXES):
        return False
    return not any(marker in url.raw_path for marker in UNSUPPORTED_PATH_MARKERS)


def discover_tests(
    manifest: ManifestFolder,
    expectation: Leaf | Node,
    filters: Sequence[str] | None = None,
    *,
    no_ignore: bool = False,
) -> list[TestToRun]:
    """Pair manifest entries with expectations and return the tests to run.

    Variations without an expectation are left out here; stale baseline
    entries are reported separately by ``assert_all_expectations_have_tests``.

    Raises:
        ConfigurationError: If a runnable test resolves to a folder expectation

    """
    tests: list[TestToRun] = []

    def visit_variation(variation: ManifestVariation, parent: Leaf | Node) -> None:
        if not variation.path:
            return
        url = BASE_URL.join(URL(variation.path))
        if not is_runnable(url):
            return

        path = canonical_path(url)
        final_key = path.split("/")[-1]
        test_expectation = resolve_child(parent, final_key, no_ignore=no_ignore)
        if test_expectation is None:
            return
        if isinstance(test_expectation, Node):
            raise ConfigurationError(
                f"Test entry {path} must not have a folder expectation"
            )
        if not matches_filters(path, filters):
            return

        tests.append(
            TestToRun(
                path=path,
                url=url,
                options=variation.options,
                expectation=test_expectation,
            )
        )

    def walk(folder: ManifestFolder, parent: Leaf | Node) -> None:
        for key, entry in folder.children.items():
            match entry:
                case VariationList(variations=variations):
                    for variation in variations:
                        visit_variation(variation, parent)
                case ManifestFolder():
                    child = resolve_child(parent, key, no_ignore=no_ignore)
                    if child is not None:
                        walk(entry, child)

    walk(manifest, expectation)
    log.debug("Discovered %d test(s)", len(tests))
    return tests


def discover_tests_for_update(
    manifest: ManifestFolder,
    baseline: Node,
    filters: Sequence[str] | None = None,
    *,
    no_ignore: bool = False,
) -> list[TestToRun]:
    """Discover every runnable test, skipping entries ignored in the baseline.

    Each test is expected to pass; the baseline is recomputed from the
    outcomes afterwards.
    """
    tests = discover_tests(manifest, PASS, filters, no_ignore=no_ignore)
    if no_ignore:
        return tests

    def ignored(test: TestToRun) -> bool:
        entry = lookup(baseline, test.path[1:].split("/"))
        return isinstance(entry, IgnoreMarker) and entry.ignore

    return [test for test in tests if not ignored(test)]


def assert_all_expectations_have_tests(
    expectation: Node,
    tests: Sequence[TestToRun],
    filters: Sequence[str] | None = None,
    *,
    no_ignore: bool = False,
) -> None:
    """Check that every baseline entry covers at least one discovered test.

    A leaf stored at a folder position covers the tests below it. Active
    ignore markers are skipped since their tests are never discovered.

    Raises:
        MissingTestsError: Listing every baseline path without a test

    """
    covered: set[str] = set()
    for test in tests:
        covered.add(test.path)
        index = test.path.find("/", 1)
        while index != -1:
            covered.add(test.path[:index])
            index = test.path.find("/", index + 1)

    missing: list[str] = []

    def walk(node: Node, parent: str) -> None:
        for key, child in node.children.items():
            path = f"{parent}/{key}"
            if isinstance(child, Node):
                if may_contain_filtered(path, filters):
                    walk(child, path)
                continue
            if isinstance(child, IgnoreMarker) and child.ignore and not no_ignore:
                continue
            if matches_filters(path, filters) and path not in covered:
                missing.append(path)

    walk(expectation, "")

    if missing:
        raise MissingTestsError(missing)
