"""Pydantic tree models, value types, JSON persistence, and the root-to-leaf classification walk."""

from __future__ import annotations

import math
from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    FieldSerializationInfo,
    field_serializer,
    field_validator,
    model_validator,
)

from idtrees.exceptions import MissingAttributeError, UnseenValueError

# ---------------------------------------------------------------------------
# Public type aliases
# ---------------------------------------------------------------------------

type Val = bool | int | float | str

type Label = bool | int | float | str

type AttributeKind = Literal["numeric", "categorical"]

type Sample = Mapping[str, Any]

_WEIGHT_SUM_TOLERANCE: float = 1e-9

# ---------------------------------------------------------------------------
# Public models
# ---------------------------------------------------------------------------


class Leaf(BaseModel):
    """Terminal node holding a class-probability distribution.

    Attributes:
        kind (Literal["leaf"]): Discriminator field; always `"leaf"`.
        classification (Mapping[Label, float]): Read-only mapping of class
            label to weight. Weights are non-negative and sum to 1.0. More
            than one label carries weight only when the leaf's samples tie on
            the majority frequency.

    Examples:
        >>> leaf = Leaf(classification={"adult": 0.5, "teenager": 0.5})
        >>> leaf.kind
        'leaf'
        >>> leaf.classification["adult"]
        0.5
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["leaf"] = Field(default="leaf", description='Discriminator field. Always "leaf".')
    classification: Mapping[Label, float] = Field(
        description="Read-only mapping of class label to weight; weights are non-negative and sum to 1.0.",
    )

    @field_validator("classification", mode="before")
    @classmethod
    def _coerce_classification_pairs(cls, value: Any) -> Any:
        """Accept the serialized list-of-pairs form as well as a plain mapping.

        Args:
            value (Any): Raw input for the `classification` field.

        Returns:
            Any: A mapping when `value` is a list of `{"label", "weight"}`
                pairs, otherwise `value` unchanged.
        """
        if isinstance(value, list):
            return {pair["label"]: pair["weight"] for pair in value}
        return value

    @field_validator("classification", mode="after")
    @classmethod
    def _validate_weights(cls, value: Mapping[Label, float]) -> Mapping[Label, float]:
        """Validate that the distribution is non-empty, non-negative and normalized.

        Args:
            value (Mapping[Label, float]): The classification mapping to validate.

        Returns:
            Mapping[Label, float]: A read-only view of the validated mapping.

        Raises:
            ValueError: If the mapping is empty, holds a negative weight, or its
                weights do not sum to 1.0.
        """
        if not value:
            raise ValueError("classification must contain at least one label")
        negative = [label for label, weight in value.items() if weight < 0.0]
        if negative:
            raise ValueError(f"classification weights must be non-negative, got negative weights for {negative}")
        total = sum(value.values())
        if not math.isclose(total, 1.0, abs_tol=_WEIGHT_SUM_TOLERANCE):
            raise ValueError(f"classification weights must sum to 1.0, got {total:.12f}")
        return MappingProxyType(dict(value))

    @field_serializer("classification")
    def _serialize_classification(self, classification: Mapping[Label, float]) -> list[dict[str, Any]]:
        """Serialize as a list of pairs so non-string labels survive JSON.

        Args:
            classification (Mapping[Label, float]): The mapping to serialize.

        Returns:
            list[dict[str, Any]]: One `{"label", "weight"}` entry per label, in
                mapping order.
        """
        return [{"label": label, "weight": weight} for label, weight in classification.items()]


class NumericSplitNode(BaseModel):
    """Internal node that splits a numeric attribute at a threshold.

    Attributes:
        kind (Literal["numeric"]): Discriminator field; always `"numeric"`.
        attr (str): Attribute the node splits on.
        threshold (int | float): Split point, the midpoint between two
            consecutive distinct observed values.
        less_equal (Tree): Subtree for samples with `value <= threshold`.
        greater (Tree): Subtree for samples with `value > threshold`.

    Examples:
        >>> node = NumericSplitNode(
        ...     attr="age",
        ...     threshold=10,
        ...     less_equal=Leaf(classification={"child": 1.0}),
        ...     greater=Leaf(classification={"adult": 1.0}),
        ... )
        >>> node.threshold
        10
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["numeric"] = Field(default="numeric", description='Discriminator field. Always "numeric".')
    attr: str = Field(description="Attribute the node splits on.")
    threshold: int | float = Field(description="Split point between two consecutive distinct observed values.")
    less_equal: Tree = Field(description="Subtree for samples whose value is <= threshold.")
    greater: Tree = Field(description="Subtree for samples whose value is > threshold.")


class CategoricalSplitNode(BaseModel):
    """Internal node with one branch per distinct value of a categorical attribute.

    Attributes:
        kind (Literal["categorical"]): Discriminator field; always `"categorical"`.
        attr (str): Attribute the node splits on.
        branches (Mapping[Val, Tree]): Read-only mapping from each value
            observed among the node's training samples to its subtree.

    Examples:
        >>> node = CategoricalSplitNode(
        ...     attr="drinks",
        ...     branches={
        ...         True: Leaf(classification={"adult": 1.0}),
        ...         False: Leaf(classification={"teenager": 1.0}),
        ...     },
        ... )
        >>> sorted(node.branches)
        [False, True]
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["categorical"] = Field(
        default="categorical",
        description='Discriminator field. Always "categorical".',
    )
    attr: str = Field(description="Attribute the node splits on.")
    branches: Mapping[Val, Tree] = Field(
        description="Read-only mapping from each value observed among the node's training samples to its subtree.",
    )

    @field_validator("branches", mode="before")
    @classmethod
    def _coerce_branch_pairs(cls, value: Any) -> Any:
        """Accept the serialized list-of-pairs form as well as a plain mapping.

        Args:
            value (Any): Raw input for the `branches` field.

        Returns:
            Any: A mapping when `value` is a list of `{"value", "subtree"}`
                pairs, otherwise `value` unchanged.
        """
        if isinstance(value, list):
            return {pair["value"]: pair["subtree"] for pair in value}
        return value

    @field_validator("branches", mode="after")
    @classmethod
    def _freeze_branches(cls, value: Mapping[Val, Tree]) -> Mapping[Val, Tree]:
        """Reject an empty branch set and wrap the rest in a read-only view.

        Args:
            value (Mapping[Val, Tree]): The validated branches.

        Returns:
            Mapping[Val, Tree]: A read-only view of `value`.

        Raises:
            ValueError: If there are no branches.
        """
        if not value:
            raise ValueError("branches must contain at least one value")
        return MappingProxyType(dict(value))

    @field_serializer("branches")
    def _serialize_branches(self, branches: Mapping[Val, Tree], info: FieldSerializationInfo) -> list[dict[str, Any]]:
        """Serialize as a list of pairs so boolean and numeric values survive JSON.

        Args:
            branches (Mapping[Val, Tree]): The mapping to serialize.
            info (FieldSerializationInfo): Serialization context; its mode is
                forwarded to the subtrees.

        Returns:
            list[dict[str, Any]]: One `{"value", "subtree"}` entry per branch,
                in mapping order.
        """
        return [{"value": value, "subtree": subtree.model_dump(mode=info.mode)} for value, subtree in branches.items()]


# Use this alias wherever a node of any kind is accepted; Pydantic selects the model from `kind`.
Tree = Annotated[
    Leaf | NumericSplitNode | CategoricalSplitNode,
    Field(discriminator="kind"),
]

NumericSplitNode.model_rebuild()
CategoricalSplitNode.model_rebuild()

# ---------------------------------------------------------------------------
# Private models -- Flat JSON document
# ---------------------------------------------------------------------------


class _LabelWeight(BaseModel):
    """One `{"label", "weight"}` entry of a serialized leaf."""

    label: Label
    weight: float


class _LeafRecord(BaseModel):
    """Serialized leaf."""

    kind: Literal["leaf"] = "leaf"
    classification: list[_LabelWeight]


class _NumericRecord(BaseModel):
    """Serialized numeric split; children are node-table indices."""

    kind: Literal["numeric"] = "numeric"
    attr: str
    threshold: int | float
    less_equal: int
    greater: int


class _BranchRecord(BaseModel):
    """One `{"value", "subtree"}` entry of a serialized categorical split."""

    value: Val
    subtree: int


class _CategoricalRecord(BaseModel):
    """Serialized categorical split; subtrees are node-table indices."""

    kind: Literal["categorical"] = "categorical"
    attr: str
    branches: list[_BranchRecord]


_NodeRecord = Annotated[
    _LeafRecord | _NumericRecord | _CategoricalRecord,
    Field(discriminator="kind"),
]


class _TreeDocument(BaseModel):
    """A tree flattened into a node table.

    The root is `nodes[0]`. Every other node is referenced by exactly one
    parent and is stored after it, so the table can be written and read
    with plain loops whatever the depth of the tree.
    """

    nodes: list[_NodeRecord] = Field(min_length=1)

    @model_validator(mode="after")
    def _check_links(self) -> _TreeDocument:
        """Check that the child links describe a single tree rooted at `nodes[0]`.

        Returns:
            _TreeDocument: The validated document.

        Raises:
            ValueError: If a link points outside the table or backwards, a node
                has two parents, or a node cannot be reached from the root.
        """
        linked = [False] * len(self.nodes)
        for index, record in enumerate(self.nodes):
            for child in _record_children(record):
                if not index < child < len(self.nodes):
                    raise ValueError(f"node {index} links to invalid child index {child}")
                if linked[child]:
                    raise ValueError(f"node {child} has more than one parent")
                linked[child] = True
        unreachable = [index for index in range(1, len(self.nodes)) if not linked[index]]
        if unreachable:
            raise ValueError(f"nodes {unreachable} are not reachable from the root")
        return self


# ---------------------------------------------------------------------------
# Public interface -- Serialization
# ---------------------------------------------------------------------------


def tree_to_json(tree: Tree, *, indent: int | None = None) -> str:
    """Serialize a tree to JSON.

    The document is a flat node table, `{"nodes": [...]}`, with the root
    first. Internal nodes refer to their children by table index. Leaf
    distributions and categorical branches are lists of pairs, so boolean
    and numeric labels and values keep their types.

    Args:
        tree (Tree): The tree to serialize.
        indent (int | None): Indentation for pretty printing; `None` for compact output.

    Returns:
        str: The JSON document.

    Examples:
        >>> tree_to_json(Leaf(classification={"child": 1.0}))
        '{"nodes":[{"kind":"leaf","classification":[{"label":"child","weight":1.0}]}]}'
    """
    records: list[_LeafRecord | _NumericRecord | _CategoricalRecord | None] = [None]
    stack: list[tuple[Tree, int]] = [(tree, 0)]
    while stack:
        node, index = stack.pop()
        if isinstance(node, Leaf):
            pairs = [_LabelWeight(label=label, weight=weight) for label, weight in node.classification.items()]
            records[index] = _LeafRecord(classification=pairs)
            continue

        first_child = len(records)
        if isinstance(node, NumericSplitNode):
            subtrees = [node.less_equal, node.greater]
            records[index] = _NumericRecord(
                attr=node.attr,
                threshold=node.threshold,
                less_equal=first_child,
                greater=first_child + 1,
            )
        else:
            subtrees = list(node.branches.values())
            records[index] = _CategoricalRecord(
                attr=node.attr,
                branches=[
                    _BranchRecord(value=value, subtree=first_child + offset)
                    for offset, value in enumerate(node.branches)
                ],
            )
        records.extend([None] * len(subtrees))
        stack.extend((subtree, first_child + offset) for offset, subtree in enumerate(subtrees))
    return _TreeDocument(nodes=records).model_dump_json(indent=indent)


def tree_from_json(text: str | bytes) -> Tree:
    """Rebuild a tree from the JSON produced by `tree_to_json`.

    Nodes are assembled from the end of the table backwards, so every child
    exists before its parent is built.

    Args:
        text (str | bytes): The JSON document.

    Returns:
        Tree: The reconstructed tree, equal to the serialized one.

    Raises:
        pydantic.ValidationError: If the document does not describe a valid tree.
    """
    document = _TreeDocument.model_validate_json(text)
    nodes: list[Tree | None] = [None] * len(document.nodes)
    for index in reversed(range(len(document.nodes))):
        record = document.nodes[index]
        if isinstance(record, _LeafRecord):
            nodes[index] = Leaf(classification={pair.label: pair.weight for pair in record.classification})
        elif isinstance(record, _NumericRecord):
            nodes[index] = NumericSplitNode(
                attr=record.attr,
                threshold=record.threshold,
                less_equal=nodes[record.less_equal],
                greater=nodes[record.greater],
            )
        else:
            nodes[index] = CategoricalSplitNode(
                attr=record.attr,
                branches={branch.value: nodes[branch.subtree] for branch in record.branches},
            )
    return nodes[0]


# ---------------------------------------------------------------------------
# Public interface -- Classification walk
# ---------------------------------------------------------------------------


def classify(tree: Tree, sample: Sample) -> dict[Label, float]:
    """Walk a sample from the root to a leaf and return that leaf's distribution.

    Args:
        tree (Tree): A tree produced by `build_tree`.
        sample (Sample): Mapping of attribute name to value. Only the
            attributes on the walked path are read.

    Returns:
        dict[Label, float]: A copy of the reached leaf's classification.

    Raises:
        MissingAttributeError: If the sample lacks an attribute a node splits on.
        UnseenValueError: If a categorical node has no branch for the sample's value.

    Examples:
        >>> tree = NumericSplitNode(
        ...     attr="age",
        ...     threshold=10,
        ...     less_equal=Leaf(classification={"child": 1.0}),
        ...     greater=Leaf(classification={"adult": 1.0}),
        ... )
        >>> classify(tree, {"age": 7})
        {'child': 1.0}
    """
    node: Tree = tree
    while not isinstance(node, Leaf):
        if node.attr not in sample:
            raise MissingAttributeError(node.attr)
        value = sample[node.attr]
        if isinstance(node, NumericSplitNode):
            node = node.less_equal if value <= node.threshold else node.greater
            continue
        try:
            node = node.branches[value]
        except KeyError:
            raise UnseenValueError(node.attr, value=value) from None
    return dict(node.classification)


def predict(tree: Tree, sample: Sample) -> Label:
    """Return the most likely class label for a sample.

    Ties between equally weighted labels resolve to the label listed first in
    the leaf, which is the label seen first among the leaf's training samples.

    Args:
        tree (Tree): A tree produced by `build_tree`.
        sample (Sample): Mapping of attribute name to value.

    Returns:
        Label: The highest-weight label at the reached leaf.
    """
    classification = classify(tree, sample)
    return max(classification.items(), key=lambda item: item[1])[0]


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _record_children(record: _LeafRecord | _NumericRecord | _CategoricalRecord) -> list[int]:
    """Return the node-table indices a serialized node links to.

    Args:
        record (_LeafRecord | _NumericRecord | _CategoricalRecord): The serialized node.

    Returns:
        list[int]: Child indices in traversal order; empty for a leaf.
    """
    if isinstance(record, _NumericRecord):
        return [record.less_equal, record.greater]
    if isinstance(record, _CategoricalRecord):
        return [branch.subtree for branch in record.branches]
    return []
