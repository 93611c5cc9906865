"""Custom exceptions for decision tree induction.

This module defines the failures that tree construction and tree traversal can
raise:

Construction exceptions (subclass TreeConstructionError):
- EmptySampleSetError: Raised when the sample set is empty.
- InvalidMinLeafSizeError: Raised when `min_leaf_size` is below 1.
- MissingAttributeError: Raised when a sample lacks an attribute or its label.
- AttributeTypeError: Raised when a value does not match its attribute kind.
- UnsupportedColumnError: Raised when a DataFrame column cannot be used as a feature.

Traversal exceptions:
- UnseenValueError: Raised when classification reaches a categorical node with
  a value that was never observed during training.

"No usable split" is never an exception; it is the normal way a leaf is made.
"""

from __future__ import annotations

from typing import Any


class TreeConstructionError(Exception):
    """Base exception for every failure raised while building a tree.

    Catch this to handle any construction failure. `build_tree` either returns
    a fully formed tree or raises a subclass of this exception.
    """


class EmptySampleSetError(TreeConstructionError, ValueError):
    """Raised when a tree is requested for an empty sample set.

    Examples:
        >>> err = EmptySampleSetError()
        >>> str(err)
        'Cannot build a decision tree from an empty sample set'
    """

    def __init__(self) -> None:
        """Initialize EmptySampleSetError."""
        super().__init__("Cannot build a decision tree from an empty sample set")


class InvalidMinLeafSizeError(TreeConstructionError, ValueError):
    """Raised when `min_leaf_size` is smaller than 1.

    Attributes:
        min_leaf_size (int): The rejected value.

    Examples:
        >>> err = InvalidMinLeafSizeError(0)
        >>> err.min_leaf_size
        0
    """

    min_leaf_size: int

    def __init__(self, min_leaf_size: int) -> None:
        """Initialize InvalidMinLeafSizeError.

        Args:
            min_leaf_size (int): The rejected minimum leaf size.
        """
        super().__init__(f"min_leaf_size must be at least 1, got {min_leaf_size}")
        self.min_leaf_size = min_leaf_size

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including the rejected value.
        """
        return f"{self.__class__.__name__}(min_leaf_size={self.min_leaf_size!r})"


class MissingAttributeError(TreeConstructionError, KeyError):
    """Raised when a sample does not provide a required attribute.

    Also raised by `classify` when the sample being classified lacks the
    attribute a node splits on; in that case `sample_index` is `None`.

    Attributes:
        attr (str): The attribute that could not be found.
        sample_index (int | None): Position of the offending sample in the
            input sequence, or `None` outside of construction.

    Examples:
        >>> err = MissingAttributeError("age", sample_index=3)
        >>> err.attr, err.sample_index
        ('age', 3)
    """

    attr: str
    sample_index: int | None

    def __init__(self, attr: str, *, sample_index: int | None = None) -> None:
        """Initialize MissingAttributeError.

        Args:
            attr (str): The missing attribute name.
            sample_index (int | None): Index of the sample missing the attribute.
        """
        where = f" at sample {sample_index}" if sample_index is not None else ""
        super().__init__(f"Attribute '{attr}' is missing{where}")
        self.attr = attr
        self.sample_index = sample_index

    def __str__(self) -> str:
        """Return the plain message instead of KeyError's quoted repr.

        Returns:
            str: The error message.
        """
        return str(self.args[0])

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including the attribute and sample index.
        """
        return f"{self.__class__.__name__}(attr={self.attr!r}, sample_index={self.sample_index!r})"


class AttributeTypeError(TreeConstructionError, TypeError):
    """Raised when a sample's value is inconsistent with its attribute kind.

    A numeric attribute requires an `int` or `float` that is not NaN (booleans
    are rejected). A categorical attribute, and the label, require a hashable
    value.

    Attributes:
        attr (str): The attribute whose value is inconsistent.
        sample_index (int): Position of the offending sample.
        value (Any): The offending value.
        expected_kind (str): `"numeric"`, `"categorical"` or `"label"`.

    Examples:
        >>> err = AttributeTypeError("age", sample_index=2, value="old", expected_kind="numeric")
        >>> print(err)
        Attribute 'age' at sample 2 expects a numeric value, got str 'old'
    """

    attr: str
    sample_index: int
    value: Any
    expected_kind: str

    def __init__(self, attr: str, *, sample_index: int, value: Any, expected_kind: str) -> None:
        """Initialize AttributeTypeError.

        Args:
            attr (str): The attribute whose value is inconsistent.
            sample_index (int): Index of the offending sample.
            value (Any): The offending value.
            expected_kind (str): The kind the attribute was declared or inferred as.
        """
        super().__init__(
            f"Attribute '{attr}' at sample {sample_index} expects a {expected_kind} value,"
            f" got {type(value).__name__} {value!r}"
        )
        self.attr = attr
        self.sample_index = sample_index
        self.value = value
        self.expected_kind = expected_kind

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including the attribute, sample index, value and kind.
        """
        return (
            f"{self.__class__.__name__}("
            f"attr={self.attr!r}, sample_index={self.sample_index!r}, "
            f"value={self.value!r}, expected_kind={self.expected_kind!r})"
        )


class UnsupportedColumnError(TreeConstructionError, ValueError):
    """Raised when a DataFrame column cannot serve as a tree attribute.

    Attributes:
        column (str): The rejected column name.
        reason (str): Human-readable explanation, e.g. `"contains null values"`.

    Examples:
        >>> err = UnsupportedColumnError("signup_date", reason="unsupported dtype Date")
        >>> err.reason
        'unsupported dtype Date'
    """

    column: str
    reason: str

    def __init__(self, column: str, *, reason: str) -> None:
        """Initialize UnsupportedColumnError.

        Args:
            column (str): The rejected column name.
            reason (str): Why the column cannot be used.
        """
        super().__init__(f"Column '{column}' cannot be used: {reason}")
        self.column = column
        self.reason = reason

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including the column and reason.
        """
        return f"{self.__class__.__name__}(column={self.column!r}, reason={self.reason!r})"


class UnseenValueError(LookupError):
    """Raised when a categorical node has no branch for a sample's value.

    Attributes:
        attr (str): The attribute the node splits on.
        value (Any): The value with no matching branch.

    Examples:
        >>> err = UnseenValueError("color", value="purple")
        >>> print(err)
        No branch for value 'purple' of attribute 'color'
    """

    attr: str
    value: Any

    def __init__(self, attr: str, *, value: Any) -> None:
        """Initialize UnseenValueError.

        Args:
            attr (str): The attribute the node splits on.
            value (Any): The value that was never observed during training.
        """
        super().__init__(f"No branch for value {value!r} of attribute '{attr}'")
        self.attr = attr
        self.value = value

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including the attribute and value.
        """
        return f"{self.__class__.__name__}(attr={self.attr!r}, value={self.value!r})"
