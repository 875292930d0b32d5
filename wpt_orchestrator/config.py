"""Configuration for an orchestrator invocation."""

import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wpt_orchestrator.models.result import Timeouts


def default_concurrency() -> int:
    """Available hardware concurrency, at least one."""
    return os.cpu_count() or 1


class OrchestratorConfig(BaseModel):
    """Options shared by the ``run`` and ``update`` commands."""

    model_config = ConfigDict(frozen=True)

    manifest_path: Path
    expectation_path: Path
    runner: str
    runner_config: Mapping[str, Any] = Field(default_factory=dict)
    filters: Sequence[str] = ()
    json_path: Path | None = None
    wptreport_path: Path | None = None
    no_ignore: bool = False
    quiet: bool = False
    concurrency: int = Field(default_factory=default_concurrency, ge=1)
    ci: bool = Field(default_factory=lambda: bool(os.environ.get("CI")))

    @property
    def timeouts(self) -> Timeouts:
        """Per-test timeouts for this environment."""
        return Timeouts.for_environment(ci=self.ci)
