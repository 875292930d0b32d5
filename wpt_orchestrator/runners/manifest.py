"""Runner plugins: a config model plus a factory for the runner."""

from collections.abc import Callable, Mapping
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from wpt_orchestrator.runners.base import TestRunner


@dataclass(frozen=True, kw_only=True)
class RunnerManifest[ConfigT: BaseModel]:
    """What a runner plugin exposes through its entry point.

    The runner itself is only built once selected, inside an async context
    that owns its resources (sessions, subprocess state).
    """

    config_cls: type[ConfigT]
    runner_factory: Callable[[ConfigT], AbstractAsyncContextManager[TestRunner]]

    def open(
        self, raw_config: Mapping[str, Any]
    ) -> AbstractAsyncContextManager[TestRunner]:
        """Validate ``raw_config`` and return the runner's context manager.

        Raises:
            pydantic.ValidationError: If the config does not fit ``config_cls``

        """
        return self.runner_factory(self.config_cls.model_validate(raw_config))
