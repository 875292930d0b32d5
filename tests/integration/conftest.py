"""Fixtures for integration tests."""

import sys
import textwrap
from collections.abc import Iterator
from pathlib import Path

import pytest
from aioresponses import aioresponses as aioresponses_cls

FAKE_RUNTIME = textwrap.dedent(
    """
    import json
    import os
    import sys
    import time

    url = sys.argv[1]
    options = json.loads(sys.stdin.read() or "{}")

    if "FAKE_RUNTIME_PID_FILE" in os.environ:
        with open(os.environ["FAKE_RUNTIME_PID_FILE"], "w") as pid_file:
            pid_file.write(str(os.getpid()))

    def emit(message):
        print(json.dumps(message), flush=True)

    print("console output from the test")
    if "hang" in url:
        time.sleep(60)
    if "oversized" in url:
        sys.stdout.write("x" * 5 * 1024 * 1024)
        sys.stdout.flush()
        time.sleep(60)
    if "crash" in url:
        print("uncaught exception", file=sys.stderr)
        sys.exit(3)
    emit({"case": {"name": "url is " + url, "passed": True, "status": 0}})
    if "linger" in url:
        time.sleep(60)
    emit(
        {
            "case": {
                "name": "options",
                "passed": options.get("timeout") == "long",
                "status": 0 if options.get("timeout") == "long" else 1,
                "message": "timeout was " + str(options.get("timeout")),
            }
        }
    )
    if "exhausted" not in url:
        emit({"harness_status": {"status": 0}})
    """
)


@pytest.fixture
def fake_runtime_command(tmp_path: Path) -> list[str]:
    """Command running a script that behaves like a runtime under test."""
    script = tmp_path / "fake_runtime.py"
    script.write_text(FAKE_RUNTIME)
    return [sys.executable, str(script)]


@pytest.fixture
def aioresponses() -> Iterator[aioresponses_cls]:
    """Mock aiohttp requests."""
    with aioresponses_cls() as mocked:
        yield mocked
