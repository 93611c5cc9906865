"""idtrees: ID3 decision tree induction over numeric and categorical attributes."""

from loguru import logger

from idtrees.exceptions import (
    AttributeTypeError,
    EmptySampleSetError,
    InvalidMinLeafSizeError,
    MissingAttributeError,
    TreeConstructionError,
    UnseenValueError,
    UnsupportedColumnError,
)
from idtrees.frames import build_tree_from_frame, samples_from_frame
from idtrees.induction import build_tree
from idtrees.logging import PACKAGE_NAME, enable_logging
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
from idtrees.rules import LeafRule, Predicate, extract_rules, leaf_count, tree_depth
from idtrees.settings import InductionSettings

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the idtrees package by default

__all__ = [
    "AttributeTypeError",
    "CategoricalSplitNode",
    "EmptySampleSetError",
    "InductionSettings",
    "InvalidMinLeafSizeError",
    "Leaf",
    "LeafRule",
    "MissingAttributeError",
    "NumericSplitNode",
    "Predicate",
    "Tree",
    "TreeConstructionError",
    "UnseenValueError",
    "UnsupportedColumnError",
    "build_tree",
    "build_tree_from_frame",
    "classify",
    "enable_logging",
    "extract_rules",
    "leaf_count",
    "predict",
    "samples_from_frame",
    "tree_depth",
    "tree_from_json",
    "tree_to_json",
]
