"""HTTP runner module."""

from wpt_orchestrator.runners.http.config import HttpRunnerConfig
from wpt_orchestrator.runners.http.manifest import http_runner_manifest
from wpt_orchestrator.runners.http.runner import HttpRunner

__all__ = ["HttpRunner", "HttpRunnerConfig", "http_runner_manifest"]
