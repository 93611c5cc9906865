"""Rule extraction and structural inspection of induced trees."""

from __future__ import annotations

import operator
from collections.abc import Callable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from idtrees.models import CategoricalSplitNode, Label, Leaf, NumericSplitNode, Sample, Tree, Val

# ---------------------------------------------------------------------------
# Public type aliases
# ---------------------------------------------------------------------------

type PredicateOp = Literal["<=", ">", "=="]

# ---------------------------------------------------------------------------
# Public models
# ---------------------------------------------------------------------------


class Predicate(BaseModel):
    """A single condition on one attribute along a root-to-leaf path.

    Numeric nodes contribute `<=` / `>` predicates against their threshold;
    categorical nodes contribute `==` predicates against a branch value.

    Attributes:
        variable (str): Attribute the condition applies to, e.g. `"age"`.
        operator (PredicateOp): Comparison operator.
        value (Val): Threshold or branch value.

    Examples:
        >>> p = Predicate(variable="age", operator="<=", value=10)
        >>> str(p)
        'age <= 10'
        >>> p.eval(7)
        True
    """

    model_config = ConfigDict(frozen=True)

    variable: str = Field(description="Attribute the condition applies to, e.g. 'age'.")
    operator: PredicateOp = Field(description="Comparison operator: '<=' or '>' for thresholds, '==' for values.")
    value: Val = Field(description="Threshold for numeric predicates or branch value for categorical ones.")

    def __str__(self) -> str:
        """Return a human-readable representation of this predicate.

        Returns:
            str: The predicate as `"<variable> <operator> <value>"`.
        """
        return f"{self.variable} {self.operator} {self.value}"

    def eval(self, x: Any) -> bool:
        """Evaluate this predicate against an attribute value.

        Args:
            x (Any): The attribute value to test.

        Returns:
            bool: `True` if the predicate holds for `x`, `False` otherwise.
        """
        return _OPS[self.operator](x, self.value)


class LeafRule(BaseModel):
    """The path to one leaf, expressed as predicates, and the leaf's distribution.

    Attributes:
        predicates (list[Predicate]): Conditions from the root to the leaf. An
            empty list means the tree is a single leaf.
        classification (dict[Label, float]): The leaf's class weights.
        prediction (Label): The highest-weight label; first listed on ties.

    Examples:
        >>> rule = LeafRule(
        ...     predicates=[Predicate(variable="age", operator=">", value=10)],
        ...     classification={"adult": 1.0},
        ...     prediction="adult",
        ... )
        >>> str(rule)
        'age > 10 => adult'
    """

    model_config = ConfigDict(frozen=True)

    predicates: list[Predicate] = Field(description="Conditions along the path from the root to the leaf.")
    classification: dict[Label, float] = Field(description="Class weights at the leaf.")
    prediction: Label = Field(description="Highest-weight label at the leaf; first listed on ties.")

    def __str__(self) -> str:
        """Return the rule as `"<predicate> and <predicate> => <prediction>"`.

        Returns:
            str: Human-readable rule; a single-leaf tree renders as `"always => <prediction>"`.
        """
        conditions = " and ".join(str(predicate) for predicate in self.predicates) or "always"
        return f"{conditions} => {self.prediction}"

    def matches(self, sample: Sample) -> bool:
        """Return whether a sample satisfies every predicate of this rule.

        Args:
            sample (Sample): Mapping of attribute name to value.

        Returns:
            bool: `True` when all predicates hold.
        """
        return all(predicate.eval(sample[predicate.variable]) for predicate in self.predicates)


# ---------------------------------------------------------------------------
# Public interface -- Rule extraction and inspection
# ---------------------------------------------------------------------------


def extract_rules(tree: Tree) -> list[LeafRule]:
    """Extract one rule per leaf, in depth-first order.

    Numeric nodes visit `less_equal` before `greater`; categorical nodes visit
    branches in their stored order.

    Args:
        tree (Tree): The tree to walk.

    Returns:
        list[LeafRule]: One rule per leaf.
    """
    return _walk_tree(tree)


def tree_depth(tree: Tree) -> int:
    """Return the number of edges on the longest root-to-leaf path.

    Args:
        tree (Tree): The tree to measure.

    Returns:
        int: 0 for a single leaf.
    """
    deepest = 0
    stack: list[tuple[Tree, int]] = [(tree, 0)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, Leaf):
            deepest = max(deepest, depth)
            continue
        stack.extend((child, depth + 1) for child in _children(node))
    return deepest


def leaf_count(tree: Tree) -> int:
    """Return the number of leaves in a tree.

    Args:
        tree (Tree): The tree to measure.

    Returns:
        int: 1 for a single leaf.
    """
    count = 0
    stack: list[Tree] = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, Leaf):
            count += 1
            continue
        stack.extend(_children(node))
    return count


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

_OPS: dict[str, Callable[[Any, Any], bool]] = {
    "<=": operator.le,
    ">": operator.gt,
    "==": operator.eq,
}


def _children(node: NumericSplitNode | CategoricalSplitNode) -> list[Tree]:
    """Return the direct children of an internal node in traversal order.

    Args:
        node (NumericSplitNode | CategoricalSplitNode): The internal node.

    Returns:
        list[Tree]: `[less_equal, greater]` or the branch subtrees.
    """
    if isinstance(node, NumericSplitNode):
        return [node.less_equal, node.greater]
    return list(node.branches.values())


def _walk_tree(tree: Tree) -> list[LeafRule]:
    """Walk a tree depth-first with an explicit stack and collect one rule per leaf.

    Args:
        tree (Tree): The root to start from.

    Returns:
        list[LeafRule]: Leaf rules in depth-first order.
    """
    rules: list[LeafRule] = []
    stack: list[tuple[Tree, list[Predicate]]] = [(tree, [])]
    while stack:
        node, path_predicates = stack.pop()
        if isinstance(node, Leaf):
            prediction = max(node.classification.items(), key=lambda item: item[1])[0]
            rules.append(
                LeafRule(predicates=path_predicates, classification=dict(node.classification), prediction=prediction)
            )
            continue

        if isinstance(node, NumericSplitNode):
            steps = [
                (node.less_equal, Predicate(variable=node.attr, operator="<=", value=node.threshold)),
                (node.greater, Predicate(variable=node.attr, operator=">", value=node.threshold)),
            ]
        else:
            steps = [
                (subtree, Predicate(variable=node.attr, operator="==", value=value))
                for value, subtree in node.branches.items()
            ]
        # Reversed so the first child is popped first
        stack.extend((child, [*path_predicates, predicate]) for child, predicate in reversed(steps))
    return rules
