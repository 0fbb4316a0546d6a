"""
RMSProp gradient update rule.

This module provides `RmsProp`, the per-parameter stateful rule used by the
update coordinator. One instance is bound to exactly one parameter variable
of one layer and keeps an exponentially decaying average of the squared
gradients it has seen.

Design notes
------------
- The rule does not touch parameters; it only turns a raw gradient into the
  step to apply. Applying the step (``p <- p - step``) is the training loop's
  job.
- Hyperparameters are captured at construction and exposed read-only.
- Memory is allocated lazily from the first gradient (same shape and dtype).
- Shape validation happens before any memory mutation, so a rejected call
  leaves the rule exactly as it was.
- Rule math is expressed in terms of LayerFlow `Tensor` operations.
"""

from __future__ import annotations

import math
from typing import Optional

from ...domain._errors import InvalidConfigurationError, ShapeMismatchError
from ..tensor._tensor import Tensor


class RmsProp:
    """
    RMSProp update rule.

    Update rule
    -----------
    Let ``g`` be the gradient at the current step and ``m`` the rule memory
    (zero before the first step):

        m    <- rho * m + (1 - rho) * (g * g)
        step <- lr * g / (sqrt(m) + eps)

    Parameters
    ----------
    learning_rate : float
        Step size. Must be > 0.
    rms_decay : float
        Decay rate ``rho`` of the squared-gradient average. Must be in [0, 1).
    epsilon : float, optional
        Numerical floor added to the denominator. Must be >= 0.
        Defaults to 1e-8.

    Notes
    -----
    - NaN / Inf values in the gradient propagate into the step and memory.
    - The returned step is a new tensor; the input gradient is not modified.
    """

    def __init__(
        self,
        learning_rate: float,
        rms_decay: float,
        *,
        epsilon: float = 1e-8,
    ) -> None:
        """
        Construct an RMSProp rule.

        Raises
        ------
        InvalidConfigurationError
            If any hyperparameter is outside its valid range.
        """
        lr = float(learning_rate)
        rho = float(rms_decay)
        eps = float(epsilon)

        if not (lr > 0.0) or math.isinf(lr):
            raise InvalidConfigurationError(
                "learning_rate", lr, "must be a finite value > 0"
            )
        if not (0.0 <= rho < 1.0):
            raise InvalidConfigurationError("rms_decay", rho, "must be in [0, 1)")
        if not (eps >= 0.0):
            raise InvalidConfigurationError("epsilon", eps, "must be >= 0")

        self._learning_rate = lr
        self._rms_decay = rho
        self._epsilon = eps
        self._memory: Optional[Tensor] = None

    def __repr__(self) -> str:
        shape = None if self._memory is None else self._memory.shape
        return (
            f"RmsProp(learning_rate={self._learning_rate}, "
            f"rms_decay={self._rms_decay}, epsilon={self._epsilon}, "
            f"memory_shape={shape})"
        )

    @property
    def learning_rate(self) -> float:
        return self._learning_rate

    @property
    def rms_decay(self) -> float:
        return self._rms_decay

    @property
    def epsilon(self) -> float:
        return self._epsilon

    @property
    def memory(self) -> Optional[Tensor]:
        """
        Return the squared-gradient moving average, or None before the first
        step. The returned tensor is the live memory; do not write into it.
        """
        return self._memory

    def check_gradient(self, gradient: Tensor) -> None:
        """
        Validate that `gradient` can be consumed by this rule.

        Raises
        ------
        ShapeMismatchError
            If memory exists and its shape differs from the gradient's.
        """
        if self._memory is not None and self._memory.shape != gradient.shape:
            raise ShapeMismatchError(
                self._memory.shape, gradient.shape, op="rmsprop"
            )

    def get_gradient(self, gradient: Tensor) -> Tensor:
        """
        Consume one raw gradient and return the adjusted step.

        Parameters
        ----------
        gradient : Tensor
            Raw gradient of the bound parameter.

        Returns
        -------
        Tensor
            ``lr * g / (sqrt(m) + eps)`` computed with the updated memory.

        Raises
        ------
        ShapeMismatchError
            If the gradient's shape differs from the memory's shape, which
            means the rule is being reused against the wrong parameter.
        """
        self.check_gradient(gradient)

        if self._memory is None:
            # memory starts at zero, shaped like the first gradient
            self._memory = Tensor.zeros(gradient.shape, dtype=gradient.dtype)

        rho = self._rms_decay
        m_new = (rho * self._memory) + ((1.0 - rho) * (gradient * gradient))
        self._memory.copy_from(m_new)

        denom = self._memory.sqrt() + self._epsilon
        return self._learning_rate * (gradient / denom)

    def reset(self) -> None:
        """
        Drop the memory; the next `get_gradient` call starts from zeros.
        """
        self._memory = None
