"""
Shape- and configuration-related exceptions for LayerFlow.

This module defines the custom errors raised by tensor layout transforms and
by the gradient-update engine. Both exception types derive from `ValueError`
so that callers which already guard against bad arguments keep working,
while still allowing the training loop to distinguish the two failure kinds.

Numerical instability (NaN / Inf) is deliberately not represented here:
values propagate through the update rule unchanged apart from the additive
epsilon floor.
"""

from __future__ import annotations

from typing import Any, Optional


class ShapeMismatchError(ValueError):
    """
    Raised when a tensor does not have the shape an operation requires.

    Typical sources are a gradient whose shape differs from the cached
    update-rule memory, or a reshape whose source and target element counts
    disagree.

    Attributes
    ----------
    expected : Any
        The shape (or element count) the operation required.
    actual : Any
        The shape (or element count) that was supplied.
    op : str
        The name of the operation that detected the mismatch.
    """

    def __init__(self, expected: Any, actual: Any, op: str = "") -> None:
        """
        Initialize the ShapeMismatchError.

        Parameters
        ----------
        expected : Any
            The required shape or element count.
        actual : Any
            The offending shape or element count.
        op : str, optional
            Operation name used as a message prefix.
        """
        prefix = f"{op}: " if op else ""
        super().__init__(f"{prefix}shape mismatch: expected {expected}, got {actual}.")
        self.expected = expected
        self.actual = actual
        self.op = op


class InvalidConfigurationError(ValueError):
    """
    Raised when a configuration value is missing or outside its valid range.

    Examples include non-positive preprocessor dimensions, a learning rate
    of zero, or a layer that has not recorded its mini-batch size when an
    inverse layout transform is requested.
    """

    def __init__(self, field: str, value: Any, reason: Optional[str] = None) -> None:
        """
        Initialize the InvalidConfigurationError.

        Parameters
        ----------
        field : str
            Name of the configuration field that failed validation.
        value : Any
            The rejected value.
        reason : Optional[str], optional
            Human-readable constraint description.
        """
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Invalid configuration for '{field}': {value!r}{detail}.")
        self.field = field
        self.value = value
