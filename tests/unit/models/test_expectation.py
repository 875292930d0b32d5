"""Tests for the expectation tree."""

import pytest

from wpt_orchestrator.errors import ConfigurationError
from wpt_orchestrator.models.expectation import (
    FAIL,
    PASS,
    FailingCases,
    IgnoreMarker,
    Node,
    Uniform,
    from_raw,
    insert,
    lookup,
    resolve_child,
    to_raw,
)


class TestFromRaw:
    """Tests for from_raw."""

    def test_converts_nested_tree(self) -> None:
        """Converts booleans, lists and objects into tagged values."""
        tree = from_raw(
            {
                "fetch": {
                    "api": {
                        "a.any.html": True,
                        "b.any.html": False,
                        "c.any.html": ["case1", "case2"],
                    }
                }
            }
        )

        assert tree == Node(
            children={
                "fetch": Node(
                    children={
                        "api": Node(
                            children={
                                "a.any.html": PASS,
                                "b.any.html": FAIL,
                                "c.any.html": FailingCases(names=("case1", "case2")),
                            }
                        )
                    }
                )
            }
        )

    def test_converts_ignore_marker(self) -> None:
        """An object holding only an ignore flag becomes an ignore marker."""
        tree = from_raw({"x.any.html": {"ignore": True}})

        assert tree == Node(children={"x.any.html": IgnoreMarker(ignore=True)})

    def test_converts_ignore_marker_with_expectation(self) -> None:
        """An ignore marker may carry the expectation used when it runs."""
        tree = from_raw({"x.any.html": {"ignore": True, "expectation": ["a"]}})

        assert tree == Node(
            children={
                "x.any.html": IgnoreMarker(
                    ignore=True, expectation=FailingCases(names=("a",))
                )
            }
        )

    def test_rejects_non_boolean_ignore(self) -> None:
        """Raises ConfigurationError when ignore is not a boolean."""
        with pytest.raises(ConfigurationError, match="`ignore` key must be a boolean"):
            from_raw({"x.any.html": {"ignore": "yes"}})

    @pytest.mark.parametrize("value", [1, "true", None, ["a", 2]])
    def test_rejects_malformed_leaf(self, value: object) -> None:
        """Raises ConfigurationError for leaves that are not a bool or a list."""
        with pytest.raises(ConfigurationError, match="/a/x.any.html"):
            from_raw({"a": {"x.any.html": value}})

    def test_round_trips_through_to_raw(self) -> None:
        """to_raw restores the original JSON value, key order included."""
        raw = {
            "z": {"b.any.html": True, "a.any.html": ["case"]},
            "a": {"x.any.html": {"ignore": False, "expectation": False}},
            "m": False,
        }

        assert to_raw(from_raw(raw)) == raw
        assert list(to_raw(from_raw(raw))) == ["z", "a", "m"]  # type: ignore[arg-type]


class TestResolveChild:
    """Tests for resolve_child."""

    def test_leaf_propagates_to_children(self) -> None:
        """Boolean and list expectations apply to every descendant."""
        cases = FailingCases(names=("case",))

        assert resolve_child(PASS, "anything") is PASS
        assert resolve_child(cases, "anything") is cases

    def test_node_is_indexed_by_key(self) -> None:
        """Nodes return the child stored under the key."""
        node = Node(children={"a": FAIL})

        assert resolve_child(node, "a") == FAIL
        assert resolve_child(node, "b") is None

    def test_active_ignore_marker_resolves_to_none(self) -> None:
        """Ignored entries are skipped unless overrides are enabled."""
        node = Node(children={"a": IgnoreMarker(ignore=True)})

        assert resolve_child(node, "a") is None
        assert resolve_child(node, "a", no_ignore=True) == PASS

    def test_inactive_ignore_marker_resolves_to_expectation(self) -> None:
        """A marker with ignore=false always runs with its own expectation."""
        node = Node(children={"a": IgnoreMarker(ignore=False, expectation=FAIL)})

        assert resolve_child(node, "a") == FAIL


class TestLookup:
    """Tests for lookup."""

    def test_finds_nested_entry(self) -> None:
        """Returns the entry at the given segments."""
        tree = Node(children={"a": Node(children={"x.any.html": FAIL})})

        assert lookup(tree, ["a", "x.any.html"]) == FAIL
        assert lookup(tree, ["a", "y.any.html"]) is None
        assert lookup(tree, ["b", "x.any.html"]) is None

    def test_returns_covering_leaf(self) -> None:
        """A leaf above the final segment covers the whole subtree."""
        tree = Node(children={"a": PASS})

        assert lookup(tree, ["a", "deep", "x.any.html"]) == PASS


class TestInsert:
    """Tests for insert."""

    def test_creates_intermediate_nodes(self) -> None:
        """Missing intermediate segments are created as nodes."""
        tree = insert(Node(), ["a", "b", "x.any.html"], PASS)

        assert to_raw(tree) == {"a": {"b": {"x.any.html": True}}}

    def test_replaces_leaf_at_intermediate_segment(self) -> None:
        """A boolean or list on the way down is replaced by an empty node."""
        tree = Node(children={"a": FAIL, "b": FailingCases(names=("c",))})

        tree = insert(tree, ["a", "x.any.html"], PASS)
        tree = insert(tree, ["b", "y.any.html"], FAIL)

        assert to_raw(tree) == {
            "a": {"x.any.html": True},
            "b": {"y.any.html": False},
        }

    def test_does_not_mutate_input(self) -> None:
        """Returns a new tree and leaves the original untouched."""
        original = Node(children={"a": Node(children={"x.any.html": FAIL})})

        updated = insert(original, ["a", "x.any.html"], PASS)

        assert to_raw(original) == {"a": {"x.any.html": False}}
        assert to_raw(updated) == {"a": {"x.any.html": True}}

    def test_keeps_key_order_when_overwriting(self) -> None:
        """Overwritten keys keep their position."""
        tree = from_raw({"b": True, "a": True, "c": True})
        assert isinstance(tree, Node)

        updated = insert(tree, ["a"], Uniform(passing=False))

        assert list(updated.children) == ["b", "a", "c"]

    def test_is_idempotent(self) -> None:
        """Inserting the same value twice yields an identical tree."""
        tree = from_raw({"a": {"x.any.html": False}})
        assert isinstance(tree, Node)
        value = FailingCases(names=("case1",))

        once = insert(tree, ["a", "x.any.html"], value)
        twice = insert(once, ["a", "x.any.html"], value)

        assert once == twice

    def test_rejects_empty_segments(self) -> None:
        """Raises ValueError for an empty path."""
        with pytest.raises(ValueError, match="must never be empty"):
            insert(Node(), [], PASS)
