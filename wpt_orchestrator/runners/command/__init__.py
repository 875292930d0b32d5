"""Command runner module."""

from wpt_orchestrator.runners.command.config import CommandRunnerConfig
from wpt_orchestrator.runners.command.manifest import command_runner_manifest
from wpt_orchestrator.runners.command.runner import CommandRunner

__all__ = ["CommandRunner", "CommandRunnerConfig", "command_runner_manifest"]
