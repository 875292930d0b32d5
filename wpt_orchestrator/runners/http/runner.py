"""HTTP runner implementation."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import aiohttp
from yarl import URL

from wpt_orchestrator.models.manifest import ManifestTestOptions
from wpt_orchestrator.models.result import TIMEOUT_STATUS, TestResult, Timeouts
from wpt_orchestrator.runners.base import CaseReporter, TestRunner
from wpt_orchestrator.runners.http.config import HttpRunnerConfig
from wpt_orchestrator.runners.http.models import RunResponse

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class HttpRunner(TestRunner):
    """Runs tests through a remote execution service."""

    config: HttpRunnerConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: HttpRunnerConfig
    ) -> AsyncGenerator["HttpRunner", None]:
        """Create runner with managed session lifecycle."""
        headers = {"Accept": "application/json"}
        if config.token is not None:
            headers["Authorization"] = f"Bearer {config.token.get_secret_value()}"
        async with aiohttp.ClientSession(
            base_url=config.api_base_url,
            headers=headers,
        ) as session:
            yield cls(config=config, session=session)

    async def run_single_test(
        self,
        url: URL,
        options: ManifestTestOptions,
        report_case: CaseReporter,
        timeouts: Timeouts,
    ) -> TestResult:
        """Submit the test to the service and wait for its result."""
        timeout = timeouts.for_options(options)
        payload = {
            "url": str(url),
            "options": options.model_dump(mode="json", exclude_none=True),
            "timeout": timeout,
        }

        loop = asyncio.get_running_loop()
        start = loop.time()
        try:
            async with self.session.post(
                self.config.run_path,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                if response.status != 200:
                    text = await response.text()
                    raise RuntimeError(
                        f"Failed to run test {url}: {response.status} {text}"
                    )
                data = await response.json()
        except TimeoutError:
            log.info("Test %s timed out after %.0fs", url, timeout)
            return TestResult(
                status=TIMEOUT_STATUS,
                harness_status=None,
                cases=[],
                duration=loop.time() - start,
            )

        result = RunResponse.model_validate(data).to_result(loop.time() - start)
        for case in result.cases:
            report_case(case)
        return result
