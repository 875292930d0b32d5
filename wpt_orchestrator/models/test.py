"""Runnable test descriptors produced by discovery."""

from dataclasses import dataclass

from yarl import URL

from wpt_orchestrator.models.expectation import Leaf
from wpt_orchestrator.models.manifest import ManifestTestOptions


@dataclass(frozen=True, kw_only=True)
class TestToRun:
    """One runnable variation paired with its expectation."""

    __test__ = False

    path: str
    url: URL
    options: ManifestTestOptions
    expectation: Leaf

    @property
    def bucket_key(self) -> str:
        """First path segment, e.g. ``fetch`` for ``/fetch/api/a.any.html``."""
        return self.path.split("/")[1]

    @property
    def report_name(self) -> str:
        """Canonical URL path, query and fragment used in reports."""
        name = self.url.raw_path
        if self.url.raw_query_string:
            name += f"?{self.url.raw_query_string}"
        if self.url.raw_fragment:
            name += f"#{self.url.raw_fragment}"
        return name
