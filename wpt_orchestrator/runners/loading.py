"""Runner lookup through the ``wpt_orchestrator.runners`` entry point group."""

from importlib.metadata import entry_points
from typing import Any

from wpt_orchestrator.runners.manifest import RunnerManifest

ENTRY_POINT_GROUP = "wpt_orchestrator.runners"


class RunnerNotFoundError(Exception):
    """Raised when no installed runner is registered under a key."""


def available_runners() -> list[str]:
    """Keys of every installed runner, sorted."""
    return sorted(entry.name for entry in entry_points(group=ENTRY_POINT_GROUP))


def load_runner_manifest(key: str) -> RunnerManifest[Any]:
    """Load the manifest of the runner registered as ``key``.

    Raises:
        RunnerNotFoundError: If no runner with the given key is installed

    """
    matches = entry_points(group=ENTRY_POINT_GROUP, name=key)
    if not matches:
        raise RunnerNotFoundError(
            f"Runner '{key}' not found. Available runners: {available_runners()}"
        )
    manifest: RunnerManifest[Any] = next(iter(matches)).load()
    return manifest
