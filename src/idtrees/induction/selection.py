"""Attribute kind resolution, sample validation, and best-split selection."""

from __future__ import annotations

import math
from collections.abc import Hashable, Mapping, Sequence

from idtrees.exceptions import AttributeTypeError, MissingAttributeError
from idtrees.induction.splits import SplitCandidate, find_categorical_split, find_numeric_split
from idtrees.models import AttributeKind, Sample

# ---------------------------------------------------------------------------
# Public interface -- Attribute kinds
# ---------------------------------------------------------------------------


def infer_attr_kinds(
    samples: Sequence[Sample],
    attrs: Sequence[str],
    declared: Mapping[str, AttributeKind] | None = None,
) -> dict[str, AttributeKind]:
    """Resolve whether each attribute is numeric or categorical.

    Declared kinds win. Undeclared attributes are inferred from the first
    sample: `int` and `float` values are numeric; everything else, including
    `bool`, is categorical.

    Args:
        samples (Sequence[Sample]): Non-empty sample set.
        attrs (Sequence[str]): Attributes eligible for splitting.
        declared (Mapping[str, AttributeKind] | None): Caller-declared kinds.

    Returns:
        dict[str, AttributeKind]: Kind per attribute, in `attrs` order.

    Raises:
        MissingAttributeError: If an undeclared attribute is absent from the first sample.

    Examples:
        >>> infer_attr_kinds([{"height": 2.0, "drinks": False}], ["height", "drinks"])
        {'height': 'numeric', 'drinks': 'categorical'}
    """
    declared = declared or {}
    first = samples[0]
    kinds: dict[str, AttributeKind] = {}
    for attr in attrs:
        if attr in declared:
            kinds[attr] = declared[attr]
            continue
        if attr not in first:
            raise MissingAttributeError(attr, sample_index=0)
        kinds[attr] = "numeric" if _is_number(first[attr]) else "categorical"
    return kinds


def validate_samples(
    samples: Sequence[Sample],
    kinds: Mapping[str, AttributeKind],
    *,
    label_attr: str,
) -> None:
    """Check every sample against the attribute kinds and the label attribute.

    Args:
        samples (Sequence[Sample]): The full training sample set.
        kinds (Mapping[str, AttributeKind]): Kind per attribute.
        label_attr (str): Attribute holding the class label.

    Raises:
        MissingAttributeError: If a sample lacks an attribute or the label.
        AttributeTypeError: If a numeric attribute holds a non-number or NaN,
            or a categorical attribute or the label holds an unhashable value.
    """
    for index, sample in enumerate(samples):
        if label_attr not in sample:
            raise MissingAttributeError(label_attr, sample_index=index)
        if not isinstance(sample[label_attr], Hashable):
            raise AttributeTypeError(label_attr, sample_index=index, value=sample[label_attr], expected_kind="label")
        for attr, kind in kinds.items():
            if attr not in sample:
                raise MissingAttributeError(attr, sample_index=index)
            value = sample[attr]
            if kind == "numeric" and (not _is_number(value) or (isinstance(value, float) and math.isnan(value))):
                raise AttributeTypeError(attr, sample_index=index, value=value, expected_kind=kind)
            if kind == "categorical" and not isinstance(value, Hashable):
                raise AttributeTypeError(attr, sample_index=index, value=value, expected_kind=kind)


# ---------------------------------------------------------------------------
# Public interface -- Split selection
# ---------------------------------------------------------------------------


def select_split(
    samples: Sequence[Sample],
    kinds: Mapping[str, AttributeKind],
    *,
    label_attr: str,
    gain_tolerance: float,
) -> SplitCandidate | None:
    """Pick the split with the greatest information gain across all attributes.

    Attributes are evaluated in `kinds` order and a later attribute replaces
    the incumbent only when its gain exceeds the incumbent's by more than
    `gain_tolerance`, so the first-declared attribute wins ties even when the
    two gains differ by rounding. Numeric attributes stay eligible at every depth;
    categorical attributes need no removal because re-splitting a group that
    shares one value scores zero gain.

    Args:
        samples (Sequence[Sample]): Non-empty, validated sample set.
        kinds (Mapping[str, AttributeKind]): Candidate attributes and their kinds.
        label_attr (str): Attribute holding the class label.
        gain_tolerance (float): Gains at or below this value count as no
            improvement, and gains this close to each other count as tied.

    Returns:
        SplitCandidate | None: The winning split, or `None` when no attribute
            improves on the parent.
    """
    best: SplitCandidate | None = None
    for attr, kind in kinds.items():
        candidate: SplitCandidate | None
        if kind == "numeric":
            candidate = find_numeric_split(samples, attr, label_attr=label_attr, gain_tolerance=gain_tolerance)
        else:
            candidate = find_categorical_split(samples, attr, label_attr=label_attr)
        if candidate is None or candidate.gain <= gain_tolerance:
            continue
        if best is None or candidate.gain > best.gain + gain_tolerance:
            best = candidate
    return best


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _is_number(value: object) -> bool:
    """Return `True` for `int` and `float` values, excluding `bool`.

    Args:
        value (object): The value to test.

    Returns:
        bool: Whether the value can be ordered as a number.
    """
    return isinstance(value, (int, float)) and not isinstance(value, bool)
