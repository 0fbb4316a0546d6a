"""
Concrete Tensor implementation (NumPy backend).

This module provides a concrete `Tensor` implementation that satisfies the
domain-level `ITensor` protocol. Storage is a NumPy ndarray; the tensor
exposes both its logical shape and its physical memory ordering so that
layout-sensitive code (e.g., the RNN -> CNN preprocessor) can normalize
ordering explicitly before reinterpreting elements.

Design notes
------------
- View operations (`permute`, `__getitem__`, and `reshape` when NumPy can
  avoid a copy) alias the source storage. Writing into a view writes into the
  source tensor.
- `reshape` reads elements in the tensor's own ordering by default, so a
  column-major tensor is reshaped column-major. Use `dup("c")` first, or pass
  ``order="c"``, when row-major reinterpretation is required.
- Broadcasting is intentionally not implemented; binary ops require exact
  shape matches (scalars excepted).
"""

from __future__ import annotations

from typing import Any, Optional, Union

import numpy as np

from ...domain._tensor import ITensor
from ...domain._errors import ShapeMismatchError

Number = Union[int, float]

_ORDERS = ("c", "f")


def _normalize_order(order: str) -> str:
    o = str(order).lower()
    if o not in _ORDERS:
        raise ValueError(f"order must be one of {_ORDERS}, got {order!r}")
    return o


class Tensor(ITensor):
    """
    Concrete tensor implementation (NumPy CPU backend).

    Parameters
    ----------
    shape : tuple[int, ...]
        Tensor shape.
    dtype : np.dtype, optional
        Element dtype for this tensor. Defaults to np.float32.
    order : str, optional
        Memory ordering of the freshly allocated storage, ``"c"`` or ``"f"``.
        Defaults to ``"c"``.

    Notes
    -----
    - Newly constructed tensors are zero-initialized.
    - `_data` is always an ndarray (0-d for scalars).
    """

    def __init__(
        self,
        shape: tuple[int, ...],
        *,
        dtype: np.dtype = np.float32,
        order: str = "c",
    ) -> None:
        """
        Construct a new zero-filled Tensor with allocated storage.

        Parameters
        ----------
        shape : tuple[int, ...]
            Shape of the tensor. Every dimension must be non-negative.
        dtype : np.dtype, optional
            Element dtype. Defaults to np.float32.
        order : str, optional
            ``"c"`` (row-major) or ``"f"`` (column-major).

        Raises
        ------
        ValueError
            If a dimension is negative or `order` is unknown.
        """
        shape = tuple(int(d) for d in shape)
        if any(d < 0 for d in shape):
            raise ValueError(f"Tensor dimensions must be non-negative, got {shape}")
        self._data: np.ndarray = np.zeros(
            shape, dtype=np.dtype(dtype), order=_normalize_order(order).upper()
        )

    @classmethod
    def _wrap(cls, arr: np.ndarray) -> "Tensor":
        """
        Build a Tensor around an existing ndarray without copying.

        The returned tensor aliases `arr`. This bypasses `__init__` and is
        used by view operations and arithmetic results.
        """
        t = cls.__new__(cls)
        t._data = np.asarray(arr)
        return t

    @classmethod
    def from_numpy(cls, arr: Any, *, dtype: Optional[np.dtype] = None) -> "Tensor":
        """
        Create a tensor holding a copy of `arr`.

        The memory ordering of `arr` is preserved, so a Fortran-ordered input
        yields a tensor with ``ordering == "f"``.

        Parameters
        ----------
        arr : Any
            Array-like accepted by `np.array`.
        dtype : Optional[np.dtype]
            Target dtype. Defaults to float32 for non-float input and to the
            input dtype for float input.
        """
        src = np.asarray(arr)
        if dtype is None:
            dtype = src.dtype if np.issubdtype(src.dtype, np.floating) else np.float32
        return cls._wrap(np.array(src, dtype=np.dtype(dtype), order="K", copy=True))

    @classmethod
    def zeros(
        cls, shape: tuple[int, ...], *, dtype: np.dtype = np.float32
    ) -> "Tensor":
        """
        Create a zero-filled row-major tensor.
        """
        return cls(shape, dtype=dtype)

    def __repr__(self) -> str:
        return (
            f"Tensor(shape={self.shape}, dtype={self._data.dtype}, "
            f"ordering='{self.ordering}')"
        )

    # ------------------------------------------------------------------
    # Core properties
    # ------------------------------------------------------------------
    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the tensor shape.
        """
        return tuple(int(d) for d in self._data.shape)

    @property
    def dtype(self) -> np.dtype:
        """
        Return the element dtype of this tensor.
        """
        return self._data.dtype

    @property
    def data(self) -> np.ndarray:
        """
        Return the underlying ndarray (no copy).
        """
        return self._data

    @property
    def ordering(self) -> str:
        """
        Return the physical memory ordering, ``"c"`` or ``"f"``.

        Notes
        -----
        Arrays that are both C- and F-contiguous (0-d, 1-d, or with at most
        one non-unit dimension) report ``"c"``. Non-contiguous views also
        report ``"c"`` since their logical reading order is row-major.
        """
        flags = self._data.flags
        if flags.f_contiguous and not flags.c_contiguous:
            return "f"
        return "c"

    def numel(self) -> int:
        """
        Return the total number of elements in the tensor.

        Returns
        -------
        int
            Product of all dimensions in the tensor shape.
        """
        n = 1
        for d in self.shape:
            n *= d
        return n

    def item(self) -> float:
        """
        Return the value of a single-element tensor as a Python float.
        """
        if self.numel() != 1:
            raise ShapeMismatchError(1, self.numel(), op="item")
        return float(self._data.reshape(-1)[0])

    # ------------------------------------------------------------------
    # Host interop / copies
    # ------------------------------------------------------------------
    def to_numpy(self) -> np.ndarray:
        """
        Return a copy of the tensor data as an ndarray.
        """
        return np.array(self._data, copy=True, order="K")

    def copy_from_numpy(self, arr: Any) -> None:
        """
        Copy data from a NumPy array (or array-like / scalar) into this tensor.

        Raises
        ------
        ShapeMismatchError
            If the array shape differs from the tensor shape.
        """
        arr_nd = np.asarray(arr, dtype=self.dtype)
        if arr_nd.shape != self._data.shape:
            raise ShapeMismatchError(self.shape, arr_nd.shape, op="copy_from_numpy")
        self._data[...] = arr_nd

    def copy_from(self, other: "Tensor") -> None:
        """
        Copy data from another tensor into this tensor (in-place).

        Raises
        ------
        ShapeMismatchError
            If the shapes differ.
        """
        if other.shape != self.shape:
            raise ShapeMismatchError(self.shape, other.shape, op="copy_from")
        self._data[...] = other._data

    def fill(self, value: float) -> None:
        """
        Fill the tensor in-place with a scalar value.
        """
        self._data.fill(value)

    def clone(self) -> "Tensor":
        """
        Return an independent copy that keeps the current memory ordering.
        """
        return Tensor._wrap(np.array(self._data, copy=True, order="K"))

    def dup(self, order: Optional[str] = None) -> "Tensor":
        """
        Materialize an independent copy in the requested memory ordering.

        Parameters
        ----------
        order : Optional[str]
            ``"c"`` or ``"f"``. Defaults to this tensor's ordering.

        Returns
        -------
        Tensor
            A new tensor with identical logical shape and values, laid out
            contiguously in `order`, sharing no storage with `self`.
        """
        o = _normalize_order(order or self.ordering)
        return Tensor._wrap(np.array(self._data, copy=True, order=o.upper()))

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def reshape(
        self, new_shape: tuple[int, ...], order: Optional[str] = None
    ) -> "Tensor":
        """
        Return a tensor with a new shape and the same elements.

        Parameters
        ----------
        new_shape : tuple[int, ...]
            Target shape. A single ``-1`` entry is inferred.
        order : Optional[str]
            Element reading order, ``"c"`` or ``"f"``. Defaults to the
            tensor's own ordering.

        Returns
        -------
        Tensor
            A view when NumPy can express the reshape without copying,
            otherwise a new tensor.

        Raises
        ------
        ShapeMismatchError
            If the element count of `new_shape` differs from `numel()`.
        """
        new_shape = tuple(int(d) for d in new_shape)
        o = _normalize_order(order or self.ordering)
        try:
            out = np.reshape(self._data, new_shape, order=o.upper())
        except ValueError as e:
            raise ShapeMismatchError(
                self.numel(), new_shape, op=f"reshape {self.shape}"
            ) from e
        return Tensor._wrap(out)

    def permute(self, *axes: int) -> "Tensor":
        """
        Return a view with axes reordered.

        Parameters
        ----------
        *axes : int
            A permutation of ``range(ndim)``.

        Raises
        ------
        ValueError
            If `axes` is not a permutation of the tensor's axes.
        """
        if sorted(axes) != list(range(self._data.ndim)):
            raise ValueError(
                f"permute expects a permutation of {self._data.ndim} axes, got {axes}"
            )
        return Tensor._wrap(np.transpose(self._data, axes))

    def __getitem__(self, key: Any) -> "Tensor":
        """
        Return a basic-indexing view (ints and slices only).
        """
        keys = key if isinstance(key, tuple) else (key,)
        for k in keys:
            if not isinstance(k, (int, np.integer, slice, type(Ellipsis))):
                raise TypeError(f"Only basic indexing is supported, got {type(k)!r}")
        return Tensor._wrap(np.asarray(self._data[key]))

    # ------------------------------------------------------------------
    # Elementwise math
    # ------------------------------------------------------------------
    def _operand(self, other: Union["Tensor", Number], op: str) -> Any:
        if isinstance(other, Tensor):
            if other.shape != self.shape:
                raise ShapeMismatchError(self.shape, other.shape, op=op)
            return other._data
        if isinstance(other, (int, float, np.integer, np.floating)):
            return other
        raise TypeError(f"Unsupported operand type: {type(other)!r}")

    def sqrt(self) -> "Tensor":
        return Tensor._wrap(np.sqrt(self._data))

    def abs(self) -> "Tensor":
        return Tensor._wrap(np.abs(self._data))

    def sign(self) -> "Tensor":
        return Tensor._wrap(np.sign(self._data))

    def clip(self, low: float, high: float) -> "Tensor":
        return Tensor._wrap(np.clip(self._data, low, high))

    def sum(self) -> float:
        """
        Return the sum of all elements as a Python float.
        """
        return float(np.sum(self._data))

    def norm2(self) -> float:
        """
        Return the L2 (Frobenius) norm of all elements as a Python float.
        """
        return float(np.sqrt(np.sum(np.square(self._data, dtype=np.float64))))

    def __neg__(self) -> "Tensor":
        return Tensor._wrap(-self._data)

    def __add__(self, other: Union["Tensor", Number]) -> "Tensor":
        return Tensor._wrap(self._data + self._operand(other, "add"))

    def __radd__(self, other: Number) -> "Tensor":
        return Tensor._wrap(self._operand(other, "add") + self._data)

    def __sub__(self, other: Union["Tensor", Number]) -> "Tensor":
        return Tensor._wrap(self._data - self._operand(other, "sub"))

    def __rsub__(self, other: Number) -> "Tensor":
        return Tensor._wrap(self._operand(other, "sub") - self._data)

    def __mul__(self, other: Union["Tensor", Number]) -> "Tensor":
        return Tensor._wrap(self._data * self._operand(other, "mul"))

    def __rmul__(self, other: Number) -> "Tensor":
        return Tensor._wrap(self._operand(other, "mul") * self._data)

    def __truediv__(self, other: Union["Tensor", Number]) -> "Tensor":
        return Tensor._wrap(self._data / self._operand(other, "div"))

    def __rtruediv__(self, other: Number) -> "Tensor":
        return Tensor._wrap(self._operand(other, "div") / self._data)
