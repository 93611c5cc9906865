"""Shannon entropy of class-label distributions."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

import numpy as np

from idtrees.exceptions import EmptySampleSetError
from idtrees.models import Label


def entropy(labels: Iterable[Label]) -> float:
    """Compute the base-2 Shannon entropy of a sequence of class labels.

    `H = -sum(p_c * log2(p_c))` over the classes `c` present in `labels`.

    Args:
        labels (Iterable[Label]): Class labels, one per sample.

    Returns:
        float: Entropy in bits; 0.0 for a pure set.

    Raises:
        EmptySampleSetError: If `labels` is empty.

    Examples:
        >>> entropy(["yes", "no"])
        1.0
        >>> entropy(["yes", "yes", "yes"])
        0.0
    """
    counts = Counter(labels)
    if not counts:
        raise EmptySampleSetError()
    return float(entropy_from_counts(np.fromiter(counts.values(), dtype=np.float64)))


def entropy_from_counts(counts: np.ndarray) -> np.ndarray:
    """Compute entropy along the last axis of an array of per-class counts.

    Zero counts contribute nothing, matching the `p > 0` restriction in the
    entropy sum. Rows whose counts are all zero have entropy 0.0.

    Args:
        counts (np.ndarray): Class counts with shape `(..., n_classes)`.

    Returns:
        np.ndarray: Entropy per row, with shape `counts.shape[:-1]`.
    """
    totals = counts.sum(axis=-1, keepdims=True)
    with np.errstate(divide="ignore", invalid="ignore"):
        probabilities = np.where(totals > 0, counts / totals, 0.0)
        terms = np.where(probabilities > 0, probabilities * np.log2(probabilities), 0.0)
    # `+ 0.0` turns the -0.0 of a pure row into 0.0
    return -terms.sum(axis=-1) + 0.0
