"""Expectation baseline tree.

The baseline is stored as JSON where ``true``/``false`` mark a whole file (or
subtree) as passing or failing, a list names the subtests expected to fail,
and an object groups entries by path segment. An object of the form
``{"ignore": true}`` marks an entry that is skipped unless ignore overrides
are enabled; it may carry an ``"expectation"`` key that applies when the
entry is run anyway.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from wpt_orchestrator.errors import ConfigurationError

type RawExpectation = bool | list[str] | dict[str, RawExpectation]

IGNORE_KEY = "ignore"
IGNORE_EXPECTATION_KEY = "expectation"


@dataclass(frozen=True)
class Uniform:
    """Every subtest of the file is expected to pass, or every one to fail."""

    passing: bool

    def expects_failure(self, case_name: str) -> bool:
        """Return whether the named subtest is expected to fail."""
        return not self.passing


@dataclass(frozen=True)
class FailingCases:
    """Only the named subtests are expected to fail."""

    names: tuple[str, ...]

    def expects_failure(self, case_name: str) -> bool:
        """Return whether the named subtest is expected to fail."""
        return case_name in self.names


type Leaf = Uniform | FailingCases

PASS = Uniform(passing=True)
FAIL = Uniform(passing=False)


@dataclass(frozen=True)
class IgnoreMarker:
    """Entry skipped during discovery unless ignore overrides are enabled."""

    ignore: bool
    expectation: Leaf | None = None

    def resolve(self, *, no_ignore: bool) -> Leaf | None:
        """Return the leaf that applies when the entry runs, or None to skip."""
        if self.ignore and not no_ignore:
            return None
        return self.expectation if self.expectation is not None else PASS


@dataclass(frozen=True)
class Node:
    """Directory-shaped grouping of expectations keyed by path segment."""

    children: Mapping[str, "Expectation"] = field(default_factory=dict)


type Expectation = Uniform | FailingCases | IgnoreMarker | Node


def resolve_child(
    parent: Leaf | Node, key: str, *, no_ignore: bool = False
) -> Leaf | Node | None:
    """Resolve the expectation that applies to ``key`` below ``parent``.

    Leaf expectations propagate unchanged to every descendant. Nodes are
    indexed by key; ignore markers resolve to their leaf, or to None when
    the entry is skipped. None also means there is no expectation at all.
    """
    match parent:
        case Uniform() | FailingCases():
            return parent
        case Node(children=children):
            child = children.get(key)
            if isinstance(child, IgnoreMarker):
                return child.resolve(no_ignore=no_ignore)
            return child


def lookup(tree: Expectation, segments: Sequence[str]) -> Expectation | None:
    """Return the entry stored at ``segments``.

    Leaves and ignore markers met above the final segment are returned as-is,
    since they cover the whole subtree below them.
    """
    current = tree
    for segment in segments:
        if not isinstance(current, Node):
            return current
        child = current.children.get(segment)
        if child is None:
            return None
        current = child
    return current


def insert(
    tree: Node, segments: Sequence[str], value: Leaf | IgnoreMarker
) -> Node:
    """Return a copy of ``tree`` with ``value`` stored at ``segments``.

    Intermediate entries that are not nodes are replaced by empty nodes.
    Existing keys keep their position so that rewriting a baseline with the
    same outcomes produces identical output.
    """
    if not segments:
        raise ValueError("segments must never be empty")
    head, *rest = segments
    if not rest:
        return Node(children={**tree.children, head: value})
    child = tree.children.get(head)
    subtree = child if isinstance(child, Node) else Node()
    return Node(children={**tree.children, head: insert(subtree, rest, value)})


def leaf_from_raw(raw: object, path: str) -> Leaf:
    """Convert a JSON leaf value, failing for anything but a bool or a list."""
    if isinstance(raw, bool):
        return Uniform(passing=raw)
    if isinstance(raw, list) and all(isinstance(name, str) for name in raw):
        return FailingCases(names=tuple(raw))
    raise ConfigurationError(
        f"Expectation for {path} must be a boolean or a list of subtest names"
    )


def from_raw(raw: object, path: str = "") -> Expectation:
    """Convert a decoded JSON value into an expectation tree."""
    if not isinstance(raw, dict):
        return leaf_from_raw(raw, path or "/")
    if IGNORE_KEY in raw and set(raw) <= {IGNORE_KEY, IGNORE_EXPECTATION_KEY}:
        ignore = raw[IGNORE_KEY]
        if not isinstance(ignore, bool):
            raise ConfigurationError(
                f"Entry {path}: the `ignore` key must be a boolean"
            )
        inner = raw.get(IGNORE_EXPECTATION_KEY)
        return IgnoreMarker(
            ignore=ignore,
            expectation=None if inner is None else leaf_from_raw(inner, path),
        )
    return Node(
        children={key: from_raw(value, f"{path}/{key}") for key, value in raw.items()}
    )


def to_raw(expectation: Expectation) -> RawExpectation:
    """Convert an expectation tree back into its JSON form."""
    match expectation:
        case Uniform(passing=passing):
            return passing
        case FailingCases(names=names):
            return list(names)
        case IgnoreMarker(ignore=ignore, expectation=inner):
            raw: dict[str, RawExpectation] = {IGNORE_KEY: ignore}
            if inner is not None:
                raw[IGNORE_EXPECTATION_KEY] = to_raw(inner)
            return raw
        case Node(children=children):
            return {key: to_raw(child) for key, child in children.items()}
