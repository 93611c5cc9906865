"""ID3 tree construction."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import NamedTuple

from loguru import logger

from idtrees.exceptions import EmptySampleSetError, InvalidMinLeafSizeError
from idtrees.induction.selection import infer_attr_kinds, select_split, validate_samples
from idtrees.induction.splits import NumericSplit
from idtrees.logging import SPLIT_LEVEL
from idtrees.models import AttributeKind, CategoricalSplitNode, Label, Leaf, NumericSplitNode, Sample, Tree, Val
from idtrees.rules import leaf_count, tree_depth
from idtrees.settings import InductionSettings


@dataclass(frozen=True, slots=True)
class _InductionContext:
    """Read-only parameters shared by every node expansion.

    Attributes:
        kinds (Mapping[str, AttributeKind]): Candidate attributes in tie-break order.
        label_attr (str): Attribute holding the class label.
        min_leaf_size (int): Sample sets of this size or smaller become leaves.
        gain_tolerance (float): Gains at or below this value count as no improvement.
    """

    kinds: Mapping[str, AttributeKind]
    label_attr: str
    min_leaf_size: int
    gain_tolerance: float


def build_tree(
    samples: Iterable[Sample],
    attrs: Sequence[str],
    min_leaf_size: int | None = None,
    *,
    label_attr: str | None = None,
    attr_kinds: Mapping[str, AttributeKind] | None = None,
    settings: InductionSettings | None = None,
) -> Tree:
    """Induce a classification tree with ID3.

    Each node splits on the attribute with the greatest information gain. A
    node becomes a leaf when it holds `min_leaf_size` samples or fewer, when
    all its samples share one label, or when no attribute improves on it.
    Every node receives the same attribute list: numeric attributes may be
    split again with a different threshold, categorical ones stop scoring
    once their values are uniform.

    Args:
        samples (Iterable[Sample]): Training samples; mappings from attribute
            name to value, each holding its label under `label_attr`. Never
            mutated.
        attrs (Sequence[str]): Attributes eligible for splitting. Their order
            breaks gain ties: the first-declared attribute wins.
        min_leaf_size (int | None): Minimum sample count that may still be
            split, exclusive. Defaults to `settings.min_leaf_size`.
        label_attr (str | None): Attribute holding the class label. Defaults
            to `settings.label_attr` (`"class"`).
        attr_kinds (Mapping[str, AttributeKind] | None): Declared kinds for
            some or all attributes. Undeclared attributes are inferred from the
            first sample.
        settings (InductionSettings | None): Defaults for the arguments above;
            read from `IDTREES_*` environment variables when `None`.

    Returns:
        Tree: The root of the fully built, immutable tree.

    Raises:
        EmptySampleSetError: If `samples` is empty.
        InvalidMinLeafSizeError: If `min_leaf_size` is below 1.
        MissingAttributeError: If a sample lacks an attribute or its label.
        AttributeTypeError: If a value does not match its attribute's kind.

    Examples:
        >>> samples = [
        ...     {"age": 4, "class": "child"},
        ...     {"age": 5, "class": "child"},
        ...     {"age": 30, "class": "adult"},
        ... ]
        >>> tree = build_tree(samples, ["age"])
        >>> tree.attr, tree.threshold
        ('age', 17)
    """
    settings = settings or InductionSettings()
    min_leaf_size = settings.min_leaf_size if min_leaf_size is None else min_leaf_size
    label_attr = settings.label_attr if label_attr is None else label_attr
    if min_leaf_size < 1:
        raise InvalidMinLeafSizeError(min_leaf_size)

    sample_list = list(samples)
    if not sample_list:
        raise EmptySampleSetError()

    kinds = infer_attr_kinds(sample_list, attrs, attr_kinds)
    validate_samples(sample_list, kinds, label_attr=label_attr)

    context = _InductionContext(
        kinds=kinds,
        label_attr=label_attr,
        min_leaf_size=min_leaf_size,
        gain_tolerance=settings.gain_tolerance,
    )
    logger.info(
        "Tree induction started",
        sample_count=len(sample_list),
        attr_kinds=dict(kinds),
        min_leaf_size=min_leaf_size,
    )
    tree = _grow(sample_list, context)
    logger.info("Tree induction finished", depth=tree_depth(tree), leaf_count=leaf_count(tree))
    return tree


def make_leaf(labels: Iterable[Label]) -> Leaf:
    """Build a leaf from the labels of the samples that reached it.

    The majority label gets weight 1.0. When several labels tie for the
    maximum frequency the weight is split equally among exactly those labels;
    all other labels are omitted (weight 0). Labels keep first-seen order.

    Args:
        labels (Iterable[Label]): Non-empty class labels.

    Returns:
        Leaf: The leaf node.

    Raises:
        EmptySampleSetError: If `labels` is empty.

    Examples:
        >>> dict(make_leaf(["adult", "teenager"]).classification)
        {'adult': 0.5, 'teenager': 0.5}
        >>> dict(make_leaf(["child", "child", "adult"]).classification)
        {'child': 1.0}
    """
    counts = Counter(labels)
    if not counts:
        raise EmptySampleSetError()
    top_count = max(counts.values())
    tied = [label for label, count in counts.items() if count == top_count]
    return Leaf(classification=dict.fromkeys(tied, 1.0 / len(tied)))


class _PendingSplit(NamedTuple):
    """Internal node whose children are planned but not yet assembled.

    Attributes:
        attr (str): Attribute the node splits on.
        threshold (int | float | None): Threshold of a numeric split; `None`
            for a categorical one.
        branch_values (list[Val]): Branch values of a categorical split, in
            first-seen order; empty for a numeric one.
        children (list[int]): Plan indices of the children, in traversal order.
    """

    attr: str
    threshold: int | float | None
    branch_values: list[Val]
    children: list[int]


def _grow(samples: list[Sample], context: _InductionContext) -> Tree:
    """Build the tree for the full training set without recursion.

    Partitions are expanded depth-first from an explicit work stack, and
    each expansion is recorded in a flat plan. Children are always planned
    after their parent, so walking the plan backwards assembles every node
    after all of its children.

    Args:
        samples (list[Sample]): Non-empty, validated training samples.
        context (_InductionContext): Shared induction parameters.

    Returns:
        Tree: The root of the assembled tree.
    """
    plan: list[Leaf | _PendingSplit | None] = [None]
    stack: list[tuple[int, list[Sample], int]] = [(0, samples, 0)]
    while stack:
        index, partition, depth = stack.pop()
        labels = [sample[context.label_attr] for sample in partition]
        split = None
        if len(partition) > context.min_leaf_size and len(set(labels)) > 1:
            split = select_split(
                partition,
                context.kinds,
                label_attr=context.label_attr,
                gain_tolerance=context.gain_tolerance,
            )
        if split is None:
            plan[index] = _emit_leaf(labels, depth=depth)
            continue

        logger.log(
            SPLIT_LEVEL,
            "Split selected",
            attr=split.attr,
            kind=split.kind,
            gain=split.gain,
            depth=depth,
            sample_count=len(partition),
        )
        if isinstance(split, NumericSplit):
            threshold, branch_values, partitions = split.threshold, [], [split.less_equal, split.greater]
        else:
            threshold, branch_values, partitions = None, list(split.groups), list(split.groups.values())
        children = list(range(len(plan), len(plan) + len(partitions)))
        plan.extend([None] * len(partitions))
        plan[index] = _PendingSplit(
            attr=split.attr,
            threshold=threshold,
            branch_values=branch_values,
            children=children,
        )
        # Pushed in reverse so the first child is expanded first
        for child, child_partition in reversed(list(zip(children, partitions, strict=True))):
            stack.append((child, child_partition, depth + 1))

    nodes: list[Tree | None] = [None] * len(plan)
    for index in reversed(range(len(plan))):
        entry = plan[index]
        if isinstance(entry, Leaf):
            nodes[index] = entry
            continue
        subtrees = [nodes[child] for child in entry.children]
        if entry.threshold is not None:
            nodes[index] = NumericSplitNode(
                attr=entry.attr,
                threshold=entry.threshold,
                less_equal=subtrees[0],
                greater=subtrees[1],
            )
        else:
            nodes[index] = CategoricalSplitNode(
                attr=entry.attr,
                branches=dict(zip(entry.branch_values, subtrees, strict=True)),
            )
    return nodes[0]


def _emit_leaf(labels: list[Label], *, depth: int) -> Leaf:
    """Build a leaf and log it.

    Args:
        labels (list[Label]): Labels of the samples reaching the leaf.
        depth (int): Depth of the leaf.

    Returns:
        Leaf: The leaf node.
    """
    leaf = make_leaf(labels)
    logger.debug("Leaf emitted", depth=depth, sample_count=len(labels), classification=dict(leaf.classification))
    return leaf
