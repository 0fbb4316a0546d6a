"""
Tensor interface definitions.

This module defines the domain-level interface for tensor-like objects using
structural typing. The interface captures the backend-agnostic properties
required by the gradient-update engine and the layout preprocessors: shape
and memory ordering, view operations (permute, slice, reshape), an explicit
"materialize in a given order" copy, and the elementwise arithmetic used by
update rules.

Notes
-----
- `ordering` reports the physical element layout: ``"c"`` (row-major) or
  ``"f"`` (column-major). Non-contiguous views report ``"c"`` because their
  logical reading order is row-major.
- View operations may alias the storage of the source tensor. Callers that
  need an independent buffer must use `dup()` or `clone()`.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Union, runtime_checkable

Number = Union[int, float]


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor interface.

    An `ITensor` represents a multi-dimensional numeric array. This protocol
    uses structural typing (duck typing) so that different concrete backends
    can satisfy the same contract.
    """

    # ---------------------------------------------------------------------
    # Core identity / layout
    # ---------------------------------------------------------------------
    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the shape of the tensor.

        Returns
        -------
        tuple[int, ...]
            The tensor's shape.
        """
        ...

    @property
    def ordering(self) -> str:
        """
        Return the memory ordering of the tensor, ``"c"`` or ``"f"``.
        """
        ...

    def numel(self) -> int:
        """
        Return the total number of elements.
        """
        ...

    # ---------------------------------------------------------------------
    # Host interop / initialization utilities
    # ---------------------------------------------------------------------
    def to_numpy(self) -> Any:
        """
        Convert the tensor to a backend-native array object.

        Returns
        -------
        Any
            Backend-native array (e.g., `np.ndarray`).
        """
        ...

    def copy_from_numpy(self, arr: Any) -> None:
        """
        Copy values from a backend-native array into this tensor in-place.

        Parameters
        ----------
        arr : Any
            Array-like with exactly this tensor's shape.
        """
        ...

    def copy_from(self, other: "ITensor") -> None:
        """
        Copy values from another tensor into this tensor in-place.
        """
        ...

    def fill(self, value: float) -> None:
        """
        Fill the tensor in-place with a scalar value.
        """
        ...

    def clone(self) -> "ITensor":
        """
        Return an independent copy preserving the memory ordering.
        """
        ...

    def dup(self, order: Optional[str] = None) -> "ITensor":
        """
        Materialize an independent copy laid out in the requested ordering.

        Parameters
        ----------
        order : Optional[str]
            ``"c"`` or ``"f"``. Defaults to this tensor's own ordering.
        """
        ...

    # ---------------------------------------------------------------------
    # Views
    # ---------------------------------------------------------------------
    def reshape(
        self, new_shape: tuple[int, ...], order: Optional[str] = None
    ) -> "ITensor":
        """
        Return a tensor with the same elements and a new shape.

        Parameters
        ----------
        new_shape : tuple[int, ...]
            Target shape. Its element count must equal `numel()`.
        order : Optional[str]
            Element reading order. Defaults to this tensor's ordering.
        """
        ...

    def permute(self, *axes: int) -> "ITensor":
        """
        Return a view with axes reordered.
        """
        ...

    def __getitem__(self, key: Any) -> "ITensor":
        """
        Return a basic-indexing slice view.
        """
        ...

    # ---------------------------------------------------------------------
    # Elementwise arithmetic
    # ---------------------------------------------------------------------
    def sqrt(self) -> "ITensor": ...

    def abs(self) -> "ITensor": ...

    def sign(self) -> "ITensor": ...

    def sum(self) -> float: ...

    def norm2(self) -> float: ...

    def __neg__(self) -> "ITensor": ...

    def __add__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __radd__(self, other: Number) -> "ITensor": ...

    def __sub__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __rsub__(self, other: Number) -> "ITensor": ...

    def __mul__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __rmul__(self, other: Number) -> "ITensor": ...

    def __truediv__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __rtruediv__(self, other: Number) -> "ITensor": ...
