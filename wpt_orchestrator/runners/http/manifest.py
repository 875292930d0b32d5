"""HTTP runner manifest."""

from wpt_orchestrator.runners.http.config import HttpRunnerConfig
from wpt_orchestrator.runners.http.runner import HttpRunner
from wpt_orchestrator.runners.manifest import RunnerManifest

http_runner_manifest = RunnerManifest(
    config_cls=HttpRunnerConfig,
    runner_factory=HttpRunner.from_config,
)
