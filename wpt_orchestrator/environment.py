"""Environment checks for the ``setup`` command."""

import logging
import os
import sys
from pathlib import Path

log = logging.getLogger(__name__)

TEST_HOST = "web-platform.test"


def hosts_file_path() -> Path:
    """Location of the system hosts file."""
    if sys.platform == "win32":
        system_root = os.environ.get("SystemRoot", r"C:\Windows")
        return Path(system_root) / "System32" / "drivers" / "etc" / "hosts"
    return Path("/etc/hosts")


def hosts_file_configured(path: Path) -> bool:
    """Return whether the hosts file already maps the test domains."""
    return TEST_HOST in path.read_text(encoding="utf-8", errors="replace")


def check_environment(hosts_path: Path | None = None) -> int:
    """Check the host configuration the test server depends on."""
    path = hosts_path or hosts_file_path()
    if hosts_file_configured(path):
        log.info("%s is already configured.", path)
        log.info("Setup complete!")
        return 0

    log.warning("%s has no entries for %s.", path, TEST_HOST)
    log.info("To add them, run the following from the WPT checkout:")
    if sys.platform == "win32":
        log.info(
            "    python.exe wpt make-hosts-file | Out-File %s -Encoding ascii -Append",
            path,
        )
    else:
        log.info("    python3 ./wpt make-hosts-file | sudo tee -a %s", path)
    return 1
