"""Command runner manifest."""

from wpt_orchestrator.runners.command.config import CommandRunnerConfig
from wpt_orchestrator.runners.command.runner import CommandRunner
from wpt_orchestrator.runners.manifest import RunnerManifest

command_runner_manifest = RunnerManifest(
    config_cls=CommandRunnerConfig,
    runner_factory=CommandRunner.from_config,
)
