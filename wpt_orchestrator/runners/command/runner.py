"""Command runner implementation."""

import asyncio
import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass
from typing import cast

from yarl import URL

from wpt_orchestrator.models.manifest import ManifestTestOptions
from wpt_orchestrator.models.result import (
    TIMEOUT_STATUS,
    HarnessStatus,
    TestCaseResult,
    TestResult,
    Timeouts,
)
from wpt_orchestrator.runners.base import CaseReporter, TestRunner
from wpt_orchestrator.runners.command.config import CommandRunnerConfig
from wpt_orchestrator.runners.command.messages import (
    parse_message,
    to_case_result,
    to_harness_status,
)

log = logging.getLogger(__name__)

# Subtest messages carry stack traces, so allow long stdout lines.
STREAM_LIMIT = 4 * 1024 * 1024


@dataclass(frozen=True, kw_only=True)
class CommandRunner(TestRunner):
    """Runs each test file in a fresh process of the runtime under test."""

    config: CommandRunnerConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: CommandRunnerConfig
    ) -> AsyncGenerator["CommandRunner", None]:
        """Create runner from configuration."""
        yield cls(config=config)

    async def run_single_test(
        self,
        url: URL,
        options: ManifestTestOptions,
        report_case: CaseReporter,
        timeouts: Timeouts,
    ) -> TestResult:
        """Run the test command and collect the results it streams."""
        timeout = timeouts.for_options(options)
        argv = [*self.config.command, str(url)]
        log.debug("Starting %s (timeout=%.0fs)", argv, timeout)

        loop = asyncio.get_running_loop()
        start = loop.time()
        process = await asyncio.create_subprocess_exec(
            *argv,
            cwd=self.config.cwd,
            env={**os.environ, **self.config.env},
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            limit=STREAM_LIMIT,
        )
        stdin = cast(asyncio.StreamWriter, process.stdin)
        stdout = cast(asyncio.StreamReader, process.stdout)
        stderr_task = asyncio.create_task(
            cast(asyncio.StreamReader, process.stderr).read()
        )
        cases: list[TestCaseResult] = []
        harness_status: HarnessStatus | None = None

        try:
            try:
                stdin.write(options.model_dump_json(exclude_none=True).encode())
                await stdin.drain()
            except (BrokenPipeError, ConnectionResetError):
                log.debug("Test command for %s exited before reading its options", url)
            finally:
                stdin.close()

            async with asyncio.timeout(timeout):
                async for raw_line in stdout:
                    message = parse_message(raw_line.decode(errors="replace"))
                    if message is None:
                        continue
                    if message.case is not None:
                        case = to_case_result(message.case)
                        cases.append(case)
                        report_case(case)
                    if message.harness_status is not None:
                        harness_status = to_harness_status(message.harness_status)
                status = await process.wait()
        except TimeoutError:
            log.info("Test %s timed out after %.0fs", url, timeout)
            await _kill(process)
            status = TIMEOUT_STATUS
        except BaseException:
            await _kill(process)
            stderr_task.cancel()
            await asyncio.gather(stderr_task, return_exceptions=True)
            raise

        stderr = (await stderr_task).decode(errors="replace")
        return TestResult(
            status=status,
            harness_status=harness_status,
            cases=cases,
            stderr=stderr,
            duration=loop.time() - start,
        )


async def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill ``process`` unless it already exited, then reap it."""
    if process.returncode is None:
        with suppress(ProcessLookupError):
            process.kill()
    await process.wait()
