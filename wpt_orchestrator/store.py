"""Load and save the expectation baseline, the manifest and run reports."""

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any

from wpt_orchestrator.errors import ExpectationFileError, ManifestFileError
from wpt_orchestrator.models.expectation import Node, from_raw, to_raw
from wpt_orchestrator.models.manifest import ManifestFolder, parse_manifest_folder

log = logging.getLogger(__name__)

# Mode of a baseline saved where none existed yet.
NEW_FILE_MODE = 0o644


def load_expectation(path: Path) -> Node:
    """Load the expectation baseline.

    Raises:
        FileNotFoundError: If the file does not exist
        ExpectationFileError: If the file is not a JSON object
        ConfigurationError: If an entry is not a valid expectation

    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ExpectationFileError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ExpectationFileError(f"Expectation file {path} must hold an object")

    tree = from_raw(raw)
    if not isinstance(tree, Node):
        raise ExpectationFileError(f"Expectation file {path} must hold a folder")
    return tree


def save_expectation(path: Path, tree: Node) -> None:
    """Rewrite the expectation baseline atomically."""
    content = json.dumps(to_raw(tree), indent=2) + "\n"
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        mode = NEW_FILE_MODE

    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(handle.name)
    try:
        with handle:
            handle.write(content)
        os.chmod(temp_path, mode)
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    log.info("Saved expectations to %s", path)


def load_manifest(path: Path) -> ManifestFolder:
    """Load the testharness section of a test manifest.

    Raises:
        FileNotFoundError: If the file does not exist
        ManifestFileError: If the file is not a valid manifest

    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ManifestFileError(f"Invalid JSON in {path}: {e}") from e

    try:
        testharness = raw["items"]["testharness"]
    except (KeyError, TypeError) as e:
        raise ManifestFileError(
            f"Manifest {path} has no items.testharness section"
        ) from e
    if not isinstance(testharness, dict):
        raise ManifestFileError(f"Manifest {path}: items.testharness must be an object")

    return parse_manifest_folder(testharness)


def write_json(path: Path, data: Any) -> None:
    """Write a report document."""
    path.write_text(json.dumps(data), encoding="utf-8")
    log.info("Wrote %s", path)
