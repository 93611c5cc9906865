"""Information-gain split finders for numeric and categorical attributes.

Both finders assume the sample values were already checked against the
attribute's kind (see `idtrees.induction.selection.validate_samples`); they
read `sample[attr]` and `sample[label_attr]` directly.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal, NamedTuple

import numpy as np

from idtrees.induction.entropy import entropy, entropy_from_counts
from idtrees.models import Label, Sample, Val
from idtrees.settings import DEFAULT_GAIN_TOLERANCE

# ---------------------------------------------------------------------------
# Public models
# ---------------------------------------------------------------------------


class NumericSplit(NamedTuple):
    """Best binary threshold split found for a numeric attribute.

    Attributes:
        attr (str): The attribute that was evaluated.
        threshold (int | float): Midpoint between two consecutive distinct values.
        gain (float): Information gain of the split.
        less_equal (list[Sample]): Samples with `value <= threshold`, in input order.
        greater (list[Sample]): Samples with `value > threshold`, in input order.
    """

    attr: str
    threshold: int | float
    gain: float
    less_equal: list[Sample]
    greater: list[Sample]

    @property
    def kind(self) -> Literal["numeric"]:
        """Attribute kind this split was made for."""
        return "numeric"


class CategoricalSplit(NamedTuple):
    """Partition of a sample set by every distinct value of a categorical attribute.

    Attributes:
        attr (str): The attribute that was evaluated.
        gain (float): Information gain of the partition.
        groups (dict[Val, list[Sample]]): Samples per distinct value, keyed in
            first-seen order; samples keep their input order.
    """

    attr: str
    gain: float
    groups: dict[Val, list[Sample]]

    @property
    def kind(self) -> Literal["categorical"]:
        """Attribute kind this split was made for."""
        return "categorical"


type SplitCandidate = NumericSplit | CategoricalSplit

# ---------------------------------------------------------------------------
# Public interface -- Split finders
# ---------------------------------------------------------------------------


def find_numeric_split(
    samples: Sequence[Sample],
    attr: str,
    *,
    label_attr: str,
    gain_tolerance: float = DEFAULT_GAIN_TOLERANCE,
) -> NumericSplit | None:
    """Find the information-gain maximizing threshold for a numeric attribute.

    Candidate thresholds lie between each pair of consecutive *distinct*
    values in sorted order; duplicate values never produce a candidate. All
    candidates are scored in one pass over cumulative class counts. The lowest
    threshold whose gain lies within `gain_tolerance` of the maximum wins.

    Args:
        samples (Sequence[Sample]): Non-empty sample set.
        attr (str): Numeric attribute to evaluate.
        label_attr (str): Attribute holding the class label.
        gain_tolerance (float): Gains this close to the maximum count as tied.

    Returns:
        NumericSplit | None: The best split, or `None` when the attribute has
            fewer than two distinct values among `samples`.

    Examples:
        >>> samples = [{"age": 4, "class": "child"}, {"age": 30, "class": "adult"}]
        >>> split = find_numeric_split(samples, "age", label_attr="class")
        >>> split.threshold, split.gain
        (17, 1.0)
    """
    values = [sample[attr] for sample in samples]
    order = sorted(range(len(values)), key=values.__getitem__)
    sorted_values = [values[index] for index in order]
    boundaries = [
        position for position in range(len(sorted_values) - 1) if sorted_values[position] != sorted_values[position + 1]
    ]
    if not boundaries:
        return None

    codes = _encode_labels([samples[index][label_attr] for index in order])
    one_hot = np.zeros((len(codes), int(codes.max()) + 1), dtype=np.float64)
    one_hot[np.arange(len(codes)), codes] = 1.0
    cumulative = one_hot.cumsum(axis=0)

    total_counts = cumulative[-1]
    left_counts = cumulative[boundaries]
    right_counts = total_counts - left_counts
    sample_count = float(len(samples))
    left_sizes = np.asarray(boundaries, dtype=np.float64) + 1.0
    gains = (
        entropy_from_counts(total_counts)
        - (left_sizes / sample_count) * entropy_from_counts(left_counts)
        - ((sample_count - left_sizes) / sample_count) * entropy_from_counts(right_counts)
    )

    best = int(np.flatnonzero(gains >= gains.max() - gain_tolerance)[0])
    position = boundaries[best]
    threshold = midpoint(sorted_values[position], sorted_values[position + 1])
    less_equal = [sample for sample, value in zip(samples, values, strict=True) if value <= threshold]
    greater = [sample for sample, value in zip(samples, values, strict=True) if value > threshold]
    return NumericSplit(attr=attr, threshold=threshold, gain=float(gains[best]), less_equal=less_equal, greater=greater)


def find_categorical_split(samples: Sequence[Sample], attr: str, *, label_attr: str) -> CategoricalSplit:
    """Partition samples by exact value of a categorical attribute and score the partition.

    The partition has one group per distinct value, however many there are.
    An attribute with a single distinct value always scores a gain of 0.0.

    Args:
        samples (Sequence[Sample]): Non-empty sample set.
        attr (str): Categorical attribute to evaluate.
        label_attr (str): Attribute holding the class label.

    Returns:
        CategoricalSplit: The partition and its information gain.

    Examples:
        >>> samples = [{"drinks": True, "class": "adult"}, {"drinks": False, "class": "teenager"}]
        >>> split = find_categorical_split(samples, "drinks", label_attr="class")
        >>> list(split.groups), split.gain
        ([True, False], 1.0)
    """
    groups: dict[Val, list[Sample]] = {}
    for sample in samples:
        groups.setdefault(sample[attr], []).append(sample)

    sample_count = len(samples)
    parent_entropy = entropy(sample[label_attr] for sample in samples)
    if len(groups) == 1:
        return CategoricalSplit(attr=attr, gain=0.0, groups=groups)

    weighted_child_entropy = sum(
        len(group) / sample_count * entropy(sample[label_attr] for sample in group) for group in groups.values()
    )
    return CategoricalSplit(attr=attr, gain=parent_entropy - weighted_child_entropy, groups=groups)


def midpoint(lower: int | float, upper: int | float) -> int | float:
    """Return the split threshold between two consecutive distinct values.

    Two integers give the integer midpoint `(lower + upper) // 2`, so integer
    attributes keep integer thresholds. Any other pair gives
    `(lower + upper) / 2`. The result always satisfies
    `lower <= threshold < upper`; when float rounding would place the midpoint
    on `upper`, `lower` is returned instead.

    Args:
        lower (int | float): The smaller value.
        upper (int | float): The next larger distinct value.

    Returns:
        int | float: The threshold.

    Examples:
        >>> midpoint(6, 15)
        10
        >>> midpoint(3.0, 4.3)
        3.65
    """
    if type(lower) is int and type(upper) is int:
        return (lower + upper) // 2
    threshold = (lower + upper) / 2
    if not lower <= threshold < upper:
        return lower
    return threshold


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _encode_labels(labels: Sequence[Label]) -> np.ndarray:
    """Map labels to dense integer codes in first-seen order.

    Args:
        labels (Sequence[Label]): Class labels, one per sample.

    Returns:
        np.ndarray: Integer code per label, shape `(len(labels),)`.
    """
    codes: dict[Label, int] = {}
    return np.fromiter((codes.setdefault(label, len(codes)) for label in labels), dtype=np.intp, count=len(labels))
