"""Configuration for the command runner."""

from collections.abc import Mapping, Sequence
from pathlib import Path

from pydantic import BaseModel, Field


class CommandRunnerConfig(BaseModel):
    """Configuration for the command runner.

    The test URL is appended to ``command``; the variation options are
    written to the process's stdin as JSON.
    """

    command: Sequence[str] = Field(..., min_length=1)
    cwd: Path | None = None
    env: Mapping[str, str] = Field(default_factory=dict)
