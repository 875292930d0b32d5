"""Exceptions raised before any test is executed."""

from collections.abc import Sequence


class ConfigurationError(ValueError):
    """Raised when the expectation baseline cannot describe a runnable test."""


class MissingTestsError(ConfigurationError):
    """Raised when the baseline references tests that discovery did not find."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(
            "Following tests are missing in manifest, but are present in "
            f"expectations: {', '.join(self.missing)}"
        )


class ExpectationFileError(ValueError):
    """Raised when the expectation file is not a valid expectation tree."""


class ManifestFileError(ValueError):
    """Raised when the test manifest cannot be parsed."""
