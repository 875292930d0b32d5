"""Models for the test manifest catalogue."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from pydantic import Field, ValidationError

from wpt_orchestrator.errors import ManifestFileError
from wpt_orchestrator.models.base import Model


class ManifestTestOptions(Model):
    """Options attached to one runnable variation of a test file."""

    script_metadata: Sequence[tuple[str, str]] | None = Field(
        default=None, description="Key/value pairs from the test's META comments"
    )
    timeout: str | None = Field(
        default=None, description='"long" marks a long-running test'
    )

    @property
    def title(self) -> str | None:
        """Title declared in the script metadata, if any."""
        for key, value in self.script_metadata or ():
            if key == "title":
                return value
        return None

    @property
    def is_long(self) -> bool:
        """Whether the test asks for the long timeout."""
        return self.timeout == "long"


@dataclass(frozen=True, kw_only=True)
class ManifestVariation:
    """A concrete runnable file: a relative URL path plus its options."""

    path: str | None
    options: ManifestTestOptions


@dataclass(frozen=True, kw_only=True)
class VariationList:
    """Runnable variations sharing one logical manifest key."""

    variations: Sequence[ManifestVariation]


@dataclass(frozen=True, kw_only=True)
class ManifestFolder:
    """Directory-shaped grouping of manifest entries."""

    children: Mapping[str, "ManifestEntry"]


type ManifestEntry = ManifestFolder | VariationList


def parse_variation_list(raw: list[object], path: str) -> VariationList:
    """Parse ``[metadata, [path, options], ...]``; the first slot is ignored."""
    variations: list[ManifestVariation] = []
    for item in raw[1:]:
        if not isinstance(item, list) or len(item) != 2:
            raise ManifestFileError(
                f"Manifest entry {path}: variation must be a [path, options] pair"
            )
        variation_path, options = item
        if variation_path is not None and not isinstance(variation_path, str):
            raise ManifestFileError(
                f"Manifest entry {path}: variation path must be a string"
            )
        try:
            parsed_options = ManifestTestOptions.model_validate(options or {})
        except ValidationError as e:
            raise ManifestFileError(
                f"Manifest entry {path}: invalid variation options: {e}"
            ) from e
        variations.append(
            ManifestVariation(path=variation_path, options=parsed_options)
        )
    return VariationList(variations=variations)


def parse_manifest_folder(raw: Mapping[str, object], path: str = "") -> ManifestFolder:
    """Parse a nested manifest folder into typed entries."""
    children: dict[str, ManifestEntry] = {}
    for key, value in raw.items():
        child_path = f"{path}/{key}"
        if isinstance(value, list):
            children[key] = parse_variation_list(value, child_path)
        elif isinstance(value, dict):
            children[key] = parse_manifest_folder(value, child_path)
        else:
            raise ManifestFileError(
                f"Manifest entry {child_path} must be a folder or a variation list"
            )
    return ManifestFolder(children=children)
