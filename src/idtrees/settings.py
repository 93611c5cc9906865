"""Environment-driven defaults for tree induction."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LABEL_ATTR = "class"
DEFAULT_GAIN_TOLERANCE = 1e-12


class InductionSettings(BaseSettings):
    """Default induction parameters, overridable through `IDTREES_*` environment variables.

    Explicit arguments passed to `build_tree` always take precedence over
    these values.

    Attributes:
        min_leaf_size (int): Sample sets of this size or smaller become leaves.
        label_attr (str): Name of the sample attribute holding the class label.
        gain_tolerance (float): Information gain at or below this value counts
            as no improvement. Absorbs floating-point noise in entropy sums.

    Examples:
        >>> settings = InductionSettings(min_leaf_size=3)
        >>> settings.label_attr
        'class'
    """

    model_config = SettingsConfigDict(
        env_prefix="IDTREES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    min_leaf_size: int = Field(default=1, ge=1, description="Sample sets of this size or smaller become leaves.")
    label_attr: str = Field(
        default=DEFAULT_LABEL_ATTR,
        min_length=1,
        description="Name of the sample attribute holding the class label.",
    )
    gain_tolerance: float = Field(
        default=DEFAULT_GAIN_TOLERANCE,
        ge=0.0,
        description="Information gain at or below this value counts as no improvement.",
    )
