"""End-to-end runs of the CLI against a fake runtime."""

import json
from pathlib import Path

import pytest

from wpt_orchestrator.cli import main

MANIFEST = {
    "version": 8,
    "items": {
        "testharness": {
            "a": {
                "x.any.js": ["h1", ["a/x.any.html", {"timeout": "long"}]],
                "y.any.js": ["h2", ["a/y.any.html", {}]],
            },
            "b": {
                "crash.any.js": ["h3", ["b/crash.any.html", {}]],
                "z.h2.any.js": ["h4", ["b/z.h2.any.html", {}]],
            },
        }
    },
}


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Directory holding the manifest."""
    (tmp_path / "MANIFEST.json").write_text(json.dumps(MANIFEST))
    return tmp_path


def invoke(workspace: Path, command: list[str], *args: str) -> int:
    argv = [
        *args,
        "--manifest",
        str(workspace / "MANIFEST.json"),
        "--expectation",
        str(workspace / "expectation.json"),
        "--runner",
        "command",
        "--runner-config",
        json.dumps({"command": command}),
        "--concurrency",
        "2",
    ]
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    assert isinstance(exc_info.value.code, int)
    return exc_info.value.code


def test_update_then_run(
    workspace: Path,
    fake_runtime_command: list[str],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A baseline written by update makes the next run pass."""
    monkeypatch.delenv("CI", raising=False)
    expectation_path = workspace / "expectation.json"
    expectation_path.write_text("{}\n")

    assert invoke(workspace, fake_runtime_command, "update") == 0

    first = expectation_path.read_text()
    assert json.loads(first) == {
        "a": {"x.any.html": True, "y.any.html": ["options"]},
        "b": {"crash.any.html": False},
    }

    assert invoke(workspace, fake_runtime_command, "update") == 0
    assert expectation_path.read_text() == first

    report_path = workspace / "wptreport.json"
    assert (
        invoke(workspace, fake_runtime_command, "run", "--wptreport", str(report_path))
        == 0
    )
    report = json.loads(report_path.read_text())
    statuses = {entry["test"]: entry["status"] for entry in report["results"]}
    assert statuses == {
        "/a/x.any.html": "OK",
        "/a/y.any.html": "OK",
        "/b/crash.any.html": "CRASH",
    }


def test_run_fails_on_divergence(
    workspace: Path, fake_runtime_command: list[str]
) -> None:
    """A run exits with 1 when the runtime no longer matches the baseline."""
    (workspace / "expectation.json").write_text(
        json.dumps({"a": {"x.any.html": False, "y.any.html": True}})
    )

    assert invoke(workspace, fake_runtime_command, "run", "a") == 1


def test_run_aborts_on_stale_baseline(
    workspace: Path, fake_runtime_command: list[str]
) -> None:
    """Baseline entries without a test abort before any test runs."""
    (workspace / "expectation.json").write_text(
        json.dumps({"a": {"x.any.html": True, "gone.any.html": True}})
    )

    assert invoke(workspace, fake_runtime_command, "run") == 1
