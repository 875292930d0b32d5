"""Test orchestrator scheduling test files on a bounded worker pool."""

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass

from wpt_orchestrator.analysis import TestRun
from wpt_orchestrator.models.result import TestResult, Timeouts
from wpt_orchestrator.models.test import TestToRun
from wpt_orchestrator.reporting import (
    create_case_reporter,
    report_file_result,
    report_test_header,
)
from wpt_orchestrator.runners.base import TestRunner, ignore_case

log = logging.getLogger(__name__)


def partition_tests(tests: Sequence[TestToRun]) -> list[list[TestToRun]]:
    """Group tests by their first path segment, keeping discovery order.

    Running unrelated suites side by side made runs flaky, so whole buckets
    are the unit of concurrency rather than single tests.
    """
    buckets: dict[str, list[TestToRun]] = {}
    for test in tests:
        buckets.setdefault(test.bucket_key, []).append(test)
    return list(buckets.values())


def effective_parallelism(test_count: int, concurrency: int) -> int:
    """Number of workers to use for ``test_count`` tests."""
    if concurrency <= 1 or test_count < 2:
        return 1
    return concurrency


@dataclass(frozen=True, kw_only=True)
class TestOrchestrator:
    """Runs discovered tests through a runner with bounded parallelism."""

    __test__ = False

    runner: TestRunner
    timeouts: Timeouts
    concurrency: int
    quiet: bool = False

    async def run_tests(self, tests: Sequence[TestToRun]) -> list[TestRun]:
        """Run all tests and return each test paired with its result.

        Buckets are pulled from a shared queue by a fixed number of workers.
        Results keep discovery order within a bucket; the interleaving
        across buckets is unspecified.
        """
        if not tests:
            log.info("No tests to run")
            return []

        parallelism = effective_parallelism(len(tests), self.concurrency)
        in_parallel = parallelism > 1

        queue: asyncio.Queue[list[TestToRun]] = asyncio.Queue()
        for bucket in partition_tests(tests):
            queue.put_nowait(bucket)
        worker_count = min(parallelism, queue.qsize())

        results: list[TestRun] = []
        results_lock = asyncio.Lock()

        async def worker() -> None:
            while True:
                try:
                    bucket = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                for test in bucket:
                    result = await self._run_test(test, in_parallel=in_parallel)
                    async with results_lock:
                        results.append((test, result))

        log.info(
            "Running %d test file(s) in %d bucket(s) with %d worker(s)",
            len(tests),
            queue.qsize(),
            worker_count,
        )
        await asyncio.gather(*(worker() for _ in range(worker_count)))
        log.info("Test execution completed")

        return results

    async def _run_test(self, test: TestToRun, *, in_parallel: bool) -> TestResult:
        """Run one test file; runner errors become a crashed result."""
        # Per-case progress from concurrent buckets would interleave.
        if in_parallel:
            report_case = ignore_case
        else:
            report_test_header(test)
            report_case = create_case_reporter(test.expectation, quiet=self.quiet)

        start = time.monotonic()
        try:
            result = await self.runner.run_single_test(
                test.url, test.options, report_case, self.timeouts
            )
        except Exception as e:
            log.error("Test execution failed for %s: %s", test.path, e, exc_info=e)
            result = TestResult(
                status=1,
                harness_status=None,
                cases=[],
                stderr=str(e),
                duration=time.monotonic() - start,
            )

        if in_parallel:
            report_test_header(test)
        report_file_result(result, test.expectation)
        return result
