"""
Layer interface definitions.

This module defines the narrow, domain-level view of a network layer that
the gradient-update engine and the layout preprocessors depend on. Concrete
layer mathematics (forward / backward) is outside the scope of this
contract; only the values those components read are exposed.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class ILayer(Protocol):
    """
    Domain-level layer interface.

    Notes
    -----
    - `conf` is read at the moment an update rule is first created for a
      variable; later changes do not alter rules that already exist.
    - `input_mini_batch_size` is recorded by the layer on its most recent
      forward pass and is consumed by inverse layout transforms.
    """

    @property
    def conf(self) -> Any:
        """
        Return the layer configuration record (hyperparameters).
        """
        ...

    @property
    def input_mini_batch_size(self) -> Optional[int]:
        """
        Return the mini-batch size recorded for the current input, or None
        if the layer has not seen any input yet.
        """
        ...

    def get_param(self, name: str) -> ITensor:
        """
        Return the parameter tensor registered under `name`.

        Raises
        ------
        KeyError
            If the layer owns no parameter with that name.
        """
        ...
