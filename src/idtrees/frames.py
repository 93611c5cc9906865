"""Polars adapter: turn DataFrame rows into training samples and attribute kinds."""

from __future__ import annotations

from typing import NamedTuple

import polars as pl
from loguru import logger

from idtrees.exceptions import EmptySampleSetError, UnsupportedColumnError
from idtrees.induction.builder import build_tree
from idtrees.models import AttributeKind, Sample, Tree

# ---------------------------------------------------------------------------
# Private helpers -- Column kind classification
# ---------------------------------------------------------------------------

_DTYPE_TO_ATTRIBUTE_KIND: dict[type[pl.DataType] | pl.DataType, AttributeKind] = {
    pl.Int8: "numeric",
    pl.Int16: "numeric",
    pl.Int32: "numeric",
    pl.Int64: "numeric",
    pl.UInt8: "numeric",
    pl.UInt16: "numeric",
    pl.UInt32: "numeric",
    pl.UInt64: "numeric",
    pl.Float32: "numeric",
    pl.Float64: "numeric",
    pl.Boolean: "categorical",
    pl.String: "categorical",
    pl.Categorical: "categorical",
    pl.Enum: "categorical",
}

# ---------------------------------------------------------------------------
# Public models
# ---------------------------------------------------------------------------


class FrameSamples(NamedTuple):
    """Samples and attribute metadata extracted from a DataFrame.

    Attributes:
        samples (list[Sample]): One mapping per kept row, holding the feature
            columns and the target.
        attrs (list[str]): Feature columns, in the requested order.
        attr_kinds (dict[str, AttributeKind]): Kind per feature column.
    """

    samples: list[Sample]
    attrs: list[str]
    attr_kinds: dict[str, AttributeKind]


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def classify_column(dtype: pl.DataType) -> AttributeKind | None:
    """Classify a Polars dtype as a numeric or categorical attribute.

    The lookup map uses bare class references as keys, which works for
    singleton dtypes but not for parameterized instances such as
    `Enum([...])`; an `isinstance` fallback handles those.

    Args:
        dtype (pl.DataType): The Polars data type of the column.

    Returns:
        AttributeKind | None: `"numeric"`, `"categorical"`, or `None` when the
            dtype cannot be used for splitting.

    Examples:
        >>> classify_column(pl.Float64)
        'numeric'
        >>> classify_column(pl.Date) is None
        True
    """
    kind = _DTYPE_TO_ATTRIBUTE_KIND.get(dtype)
    if kind is not None:
        return kind
    if isinstance(dtype, (pl.Enum, pl.Categorical)):
        return "categorical"
    return None


def samples_from_frame(
    df: pl.DataFrame,
    target: str,
    *,
    features: list[str] | None = None,
) -> FrameSamples:
    """Convert DataFrame rows into samples for `build_tree`.

    Rows with a null target are dropped. Feature columns must exist, have a
    supported dtype and contain no nulls; missing values are not supported.

    Args:
        df (pl.DataFrame): Source data.
        target (str): Column holding the class label.
        features (list[str] | None): Feature columns to use. When `None`, all
            columns except `target` are used.

    Returns:
        FrameSamples: Samples, attribute order and attribute kinds.

    Raises:
        UnsupportedColumnError: If the target or a feature column is missing,
            a feature is the target or is listed twice, a feature has an
            unsupported dtype, or a feature contains nulls.
        EmptySampleSetError: If no rows remain after dropping null targets.
    """
    if target not in df.columns:
        raise UnsupportedColumnError(target, reason="target column not found in DataFrame")
    feature_columns = features if features is not None else [col for col in df.columns if col != target]
    seen: set[str] = set()
    for col in feature_columns:
        if col == target:
            raise UnsupportedColumnError(col, reason="target column cannot also be a feature")
        if col in seen:
            raise UnsupportedColumnError(col, reason="feature listed more than once")
        seen.add(col)

    df_clean = df.drop_nulls(subset=[target])
    dropped = len(df) - len(df_clean)
    if dropped:
        logger.warning("Dropped rows with null target", target=target, dropped_rows=dropped)
    if df_clean.is_empty():
        raise EmptySampleSetError()

    attr_kinds = {col: _resolve_feature_kind(df_clean, col) for col in feature_columns}
    samples: list[Sample] = df_clean.select([*feature_columns, target]).to_dicts()
    logger.debug("Samples extracted from DataFrame", sample_count=len(samples), attr_kinds=attr_kinds)
    return FrameSamples(samples=samples, attrs=list(feature_columns), attr_kinds=attr_kinds)


def build_tree_from_frame(
    df: pl.DataFrame,
    target: str,
    *,
    features: list[str] | None = None,
    min_leaf_size: int | None = None,
) -> Tree:
    """Induce a tree directly from a DataFrame.

    Args:
        df (pl.DataFrame): Source data.
        target (str): Column holding the class label.
        features (list[str] | None): Feature columns to use, in tie-break
            order. When `None`, all columns except `target` are used.
        min_leaf_size (int | None): Passed through to `build_tree`.

    Returns:
        Tree: The induced tree; it classifies rows converted with `DataFrame.to_dicts()`.
    """
    frame_samples = samples_from_frame(df, target, features=features)
    return build_tree(
        frame_samples.samples,
        frame_samples.attrs,
        min_leaf_size,
        label_attr=target,
        attr_kinds=frame_samples.attr_kinds,
    )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _resolve_feature_kind(df: pl.DataFrame, column: str) -> AttributeKind:
    """Return the attribute kind of a feature column or raise why it cannot be used.

    Args:
        df (pl.DataFrame): DataFrame with null-target rows removed.
        column (str): Feature column name.

    Returns:
        AttributeKind: The column's kind.

    Raises:
        UnsupportedColumnError: If the column is missing, has an unsupported
            dtype, or contains null values.
    """
    if column not in df.columns:
        raise UnsupportedColumnError(column, reason="column not found in DataFrame")
    series = df[column]
    kind = classify_column(series.dtype)
    if kind is None:
        raise UnsupportedColumnError(column, reason=f"unsupported dtype {series.dtype}")
    if series.null_count() > 0:
        raise UnsupportedColumnError(column, reason="contains null values")
    if kind == "numeric" and series.dtype.is_float() and series.is_nan().any():
        raise UnsupportedColumnError(column, reason="contains NaN values")
    return kind
