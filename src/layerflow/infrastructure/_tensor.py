"""
Tensor facade.

Re-exports the NumPy-backed `Tensor` so callers can import it from the
infrastructure package root.
"""

from .tensor._tensor import Tensor

__all__ = [Tensor.__name__]
