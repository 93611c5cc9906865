"""Tests for the tree models: validation, equality, classification walk, and JSON round trips."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError
from pytest_check import check

from idtrees.exceptions import MissingAttributeError, UnseenValueError
from idtrees.models import (
    CategoricalSplitNode,
    Leaf,
    NumericSplitNode,
    Tree,
    classify,
    predict,
    tree_from_json,
    tree_to_json,
)
from idtrees.rules import tree_depth

_LEAF = {"kind": "leaf", "classification": [{"label": "a", "weight": 1.0}]}


class TestLeaf:
    """Tests for `Leaf` validation."""

    def test_valid_leaf_construction(self) -> None:
        """A normalized distribution should be accepted and tagged as a leaf."""
        # Arrange / Act
        leaf = Leaf(classification={"adult": 0.5, "teenager": 0.5})

        # Assert
        with check:
            assert leaf.kind == "leaf"
        with check:
            assert leaf.classification == {"adult": 0.5, "teenager": 0.5}

    def test_empty_classification_rejected(self) -> None:
        """A leaf must name at least one class."""
        with pytest.raises(ValidationError, match="at least one label"):
            Leaf(classification={})

    def test_weights_must_sum_to_one(self) -> None:
        """Weights that do not sum to 1.0 should be rejected."""
        with pytest.raises(ValidationError, match="sum to 1.0"):
            Leaf(classification={"a": 0.5, "b": 0.4})

    def test_negative_weights_rejected(self) -> None:
        """Negative weights should be rejected even when the sum is 1.0."""
        with pytest.raises(ValidationError, match="non-negative"):
            Leaf(classification={"a": 1.5, "b": -0.5})

    def test_leaf_is_frozen(self) -> None:
        """Leaves are immutable once built."""
        # Arrange
        leaf = Leaf(classification={"a": 1.0})

        # Act / Assert
        with pytest.raises(ValidationError):
            leaf.classification = {"b": 1.0}  # type: ignore[misc]

    def test_label_types_are_preserved(self) -> None:
        """Integer, boolean and string labels should keep their types."""
        # Arrange / Act
        leaf = Leaf(classification={1: 0.25, False: 0.25, "1": 0.5})

        # Assert
        assert [type(label) for label in leaf.classification] == [int, bool, str]

    def test_classification_is_read_only(self) -> None:
        """The weights of a built leaf cannot be changed in place."""
        # Arrange
        source = {"a": 0.5, "b": 0.5}
        leaf = Leaf(classification=source)

        # Act
        source["a"] = 0.9

        # Assert
        with pytest.raises(TypeError):
            leaf.classification["a"] = 1.0  # type: ignore[index]
        assert leaf.classification == {"a": 0.5, "b": 0.5}


class TestInternalNodes:
    """Tests for the numeric and categorical internal node models."""

    def test_branches_are_read_only(self) -> None:
        """Branches of a built categorical node cannot be added, replaced or removed."""
        # Arrange
        node = CategoricalSplitNode(attr="drinks", branches={True: Leaf(classification={"adult": 1.0})})

        # Act / Assert
        with pytest.raises(TypeError):
            node.branches[False] = Leaf(classification={"child": 1.0})  # type: ignore[index]
        with pytest.raises(TypeError):
            del node.branches[True]  # type: ignore[attr-defined]
        assert list(node.branches) == [True]

    def test_categorical_node_needs_at_least_one_branch(self) -> None:
        """A categorical node with no branches is invalid."""
        with pytest.raises(ValidationError):
            CategoricalSplitNode(attr="color", branches={})

    def test_equality_is_structural(self) -> None:
        """Trees built separately with the same content should compare equal."""
        # Arrange
        first = _make_mixed_tree()
        second = _make_mixed_tree()

        # Act / Assert
        assert first == second

    def test_branch_order_does_not_affect_equality(self) -> None:
        """Categorical branches compare as a mapping."""
        # Arrange
        adult = Leaf(classification={"adult": 1.0})
        teenager = Leaf(classification={"teenager": 1.0})

        # Act
        first = CategoricalSplitNode(attr="drinks", branches={True: adult, False: teenager})
        second = CategoricalSplitNode(attr="drinks", branches={False: teenager, True: adult})

        # Assert
        assert first == second

    def test_different_thresholds_are_unequal(self) -> None:
        """Changing a threshold should break equality."""
        # Arrange
        leaf_a = Leaf(classification={"a": 1.0})
        leaf_b = Leaf(classification={"b": 1.0})

        # Act
        first = NumericSplitNode(attr="x", threshold=1.5, less_equal=leaf_a, greater=leaf_b)
        second = NumericSplitNode(attr="x", threshold=2.5, less_equal=leaf_a, greater=leaf_b)

        # Assert
        assert first != second

    def test_nested_dicts_are_validated_into_models(self) -> None:
        """Plain dicts carrying a `kind` should be parsed into the matching node model."""
        # Arrange / Act
        node = NumericSplitNode.model_validate({
            "attr": "age",
            "threshold": 10,
            "less_equal": {"kind": "leaf", "classification": {"child": 1.0}},
            "greater": {
                "kind": "categorical",
                "attr": "drinks",
                "branches": {True: {"kind": "leaf", "classification": {"adult": 1.0}}},
            },
        })

        # Assert
        with check:
            assert isinstance(node.less_equal, Leaf)
        with check:
            assert isinstance(node.greater, CategoricalSplitNode)


class TestClassify:
    """Tests for `classify` and `predict`."""

    @pytest.mark.parametrize(
        ("sample", "expected"),
        [
            ({"height": 2.5, "drinks": False}, {"child": 1.0}),
            ({"height": 3.65, "drinks": True}, {"child": 1.0}),
            ({"height": 5.0, "drinks": False}, {"teenager": 1.0}),
            ({"height": 5.6, "drinks": True}, {"adult": 1.0}),
            ({"height": 6.5, "drinks": True}, {"adult": 0.5, "teenager": 0.5}),
        ],
    )
    def test_walks_to_expected_leaf(self, sample: dict[str, object], expected: dict[str, float]) -> None:
        """Each sample should reach the leaf its attribute values select.

        Args:
            sample (dict[str, object]): Sample to classify.
            expected (dict[str, float]): Expected leaf distribution.
        """
        assert classify(_make_mixed_tree(), sample) == expected

    def test_returns_a_copy(self) -> None:
        """Mutating the returned mapping should not affect the tree."""
        # Arrange
        tree = _make_mixed_tree()

        # Act
        result = classify(tree, {"height": 2.0, "drinks": False})
        result["child"] = 0.0

        # Assert
        assert classify(tree, {"height": 2.0, "drinks": False}) == {"child": 1.0}

    def test_unseen_value_raises(self) -> None:
        """A categorical value with no branch should raise `UnseenValueError`."""
        with pytest.raises(UnseenValueError) as exc_info:
            classify(_make_mixed_tree(), {"height": 5.0, "drinks": "sometimes"})

        with check:
            assert exc_info.value.attr == "drinks"
        with check:
            assert exc_info.value.value == "sometimes"

    def test_missing_attribute_raises(self) -> None:
        """A sample without the split attribute should raise `MissingAttributeError`."""
        with pytest.raises(MissingAttributeError) as exc_info:
            classify(_make_mixed_tree(), {"drinks": True})

        assert exc_info.value.attr == "height"

    def test_only_path_attributes_are_read(self) -> None:
        """Attributes not on the walked path may be absent."""
        assert classify(_make_mixed_tree(), {"height": 1.0}) == {"child": 1.0}

    def test_predict_returns_majority_label(self) -> None:
        """`predict` should return the highest-weight label."""
        assert predict(_make_mixed_tree(), {"height": 5.0, "drinks": False}) == "teenager"

    def test_predict_breaks_ties_by_leaf_order(self) -> None:
        """On a tied leaf `predict` should return the first listed label."""
        assert predict(_make_mixed_tree(), {"height": 6.5, "drinks": True}) == "adult"


class TestJsonRoundTrip:
    """Tests for `tree_to_json` and `tree_from_json`."""

    def test_round_trip_preserves_tree(self) -> None:
        """A tree should survive serialization unchanged."""
        # Arrange
        tree = _make_mixed_tree()

        # Act
        restored = tree_from_json(tree_to_json(tree))

        # Assert
        assert restored == tree

    def test_boolean_and_integer_keys_survive(self) -> None:
        """Non-string branch values and labels should keep their types through JSON."""
        # Arrange
        tree = CategoricalSplitNode(
            attr="drinks",
            branches={
                True: Leaf(classification={1: 1.0}),
                False: Leaf(classification={0: 1.0}),
            },
        )

        # Act
        restored = tree_from_json(tree_to_json(tree))

        # Assert
        assert isinstance(restored, CategoricalSplitNode)
        with check:
            assert set(restored.branches) == {True, False}
        with check:
            assert all(type(value) is bool for value in restored.branches)
        with check:
            assert restored.branches[True] == Leaf(classification={1: 1.0})

    def test_json_layout_is_a_flat_node_table(self) -> None:
        """Nodes should be listed flat, root first, with children referenced by index."""
        # Arrange
        tree = _make_mixed_tree()

        # Act
        document = json.loads(tree_to_json(tree, indent=2))

        # Assert
        nodes = document["nodes"]
        root = nodes[0]
        drinks = nodes[root["greater"]]
        with check:
            assert len(nodes) == 7
        with check:
            assert (root["kind"], root["attr"], root["threshold"]) == ("numeric", "height", 3.65)
        with check:
            assert nodes[root["less_equal"]] == {"kind": "leaf", "classification": [{"label": "child", "weight": 1.0}]}
        with check:
            assert [pair["value"] for pair in drinks["branches"]] == [False, True]
        with check:
            assert all(isinstance(pair["subtree"], int) for pair in drinks["branches"])

    def test_chain_deeper_than_serializer_nesting_limit_round_trips(self) -> None:
        """A chain of 1,500 numeric nodes should serialize and rebuild without hitting nesting limits."""
        # Arrange
        tree = _make_chain_tree(1_500)

        # Act
        text = tree_to_json(tree)
        restored = tree_from_json(text)

        # Assert
        with check:
            assert tree_to_json(restored) == text
        with check:
            assert tree_depth(restored) == 1_500
        for x, expected in [(0, {0: 1.0}), (777, {1: 1.0}), (1_499, {1: 1.0}), (5_000, {"end": 1.0})]:
            with check:
                assert classify(restored, {"x": x}) == expected

    @pytest.mark.parametrize(
        "nodes",
        [
            [{"kind": "numeric", "attr": "x", "threshold": 1, "less_equal": 1, "greater": 5}, _LEAF, _LEAF],
            [_LEAF, {"kind": "numeric", "attr": "x", "threshold": 1, "less_equal": 0, "greater": 2}, _LEAF],
            [{"kind": "numeric", "attr": "x", "threshold": 1, "less_equal": 1, "greater": 1}, _LEAF],
            [{"kind": "numeric", "attr": "x", "threshold": 1, "less_equal": 1, "greater": 2}, _LEAF, _LEAF, _LEAF],
            [],
        ],
        ids=["out-of-range", "backward-link", "two-parents", "unreachable", "empty"],
    )
    def test_malformed_node_table_raises(self, nodes: list[dict[str, object]]) -> None:
        """Links that do not describe a single tree should fail validation.

        Args:
            nodes (list[dict[str, object]]): Node table to load.
        """
        with pytest.raises(ValidationError):
            tree_from_json(json.dumps({"nodes": nodes}))

    def test_model_dump_round_trip(self) -> None:
        """Python-mode dumps should validate back into equal models."""
        # Arrange
        tree = _make_mixed_tree()

        # Act
        restored = NumericSplitNode.model_validate(tree.model_dump())

        # Assert
        assert restored == tree

    def test_invalid_document_raises(self) -> None:
        """A node with an unknown `kind` should fail validation."""
        with pytest.raises(ValidationError):
            tree_from_json('{"nodes": [{"kind": "forest"}]}')


def _make_mixed_tree() -> NumericSplitNode:
    """Return a small tree mixing numeric and categorical nodes and a tied leaf.

    Returns:
        NumericSplitNode: The root node.
    """
    return NumericSplitNode(
        attr="height",
        threshold=3.65,
        less_equal=Leaf(classification={"child": 1.0}),
        greater=CategoricalSplitNode(
            attr="drinks",
            branches={
                False: Leaf(classification={"teenager": 1.0}),
                True: NumericSplitNode(
                    attr="height",
                    threshold=5.75,
                    less_equal=Leaf(classification={"adult": 1.0}),
                    greater=Leaf(classification={"adult": 0.5, "teenager": 0.5}),
                ),
            },
        ),
    )


def _make_chain_tree(depth: int) -> Tree:
    """Return a chain of numeric nodes on `x`, one per threshold 0 to `depth - 1`.

    Each node's `less_equal` side is a leaf labelled with the threshold's
    parity; the last `greater` side is the leaf `{"end": 1.0}`.

    Args:
        depth (int): Number of numeric nodes.

    Returns:
        Tree: The root node.
    """
    node: Tree = Leaf(classification={"end": 1.0})
    for threshold in reversed(range(depth)):
        node = NumericSplitNode(
            attr="x",
            threshold=threshold,
            less_equal=Leaf(classification={threshold % 2: 1.0}),
            greater=node,
        )
    return node
