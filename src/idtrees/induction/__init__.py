"""ID3 induction sub-package: entropy, split finders, attribute selection, and the tree builder."""

from __future__ import annotations

from idtrees.induction.builder import build_tree, make_leaf
from idtrees.induction.entropy import entropy, entropy_from_counts
from idtrees.induction.selection import infer_attr_kinds, select_split, validate_samples
from idtrees.induction.splits import (
    CategoricalSplit,
    NumericSplit,
    SplitCandidate,
    find_categorical_split,
    find_numeric_split,
    midpoint,
)

__all__ = [
    "CategoricalSplit",
    "NumericSplit",
    "SplitCandidate",
    "build_tree",
    "entropy",
    "entropy_from_counts",
    "find_categorical_split",
    "find_numeric_split",
    "infer_attr_kinds",
    "make_leaf",
    "midpoint",
    "select_split",
    "validate_samples",
]
