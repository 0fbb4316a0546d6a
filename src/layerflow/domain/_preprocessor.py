"""
Input preprocessor interface definitions.

This module defines the domain-level interface (Protocol) for input
preprocessors in LayerFlow.

An input preprocessor sits on the edge between two layers whose activation
layouts differ (for example a recurrent layer emitting
``(N, features, time)`` feeding a convolutional layer expecting
``(N*time, channels, height, width)``). It provides a pair of pure functions:

- `pre_process` converts activations on the forward pass, and
- `backprop` converts the error signal flowing in the opposite direction.

Design notes
------------
- Preprocessors are immutable and hold no trainable parameters.
- Both directions preserve the total element count; applying `pre_process`
  then `backprop` restores the original shape exactly.
- The interface is backend-agnostic and does not depend on NumPy.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol, runtime_checkable

from ._tensor import ITensor
from ._layer import ILayer


@runtime_checkable
class IInputPreProcessor(Protocol):
    """
    Protocol for layout-converting input preprocessors.
    """

    def pre_process(self, x: ITensor, layer: ILayer) -> ITensor:
        """
        Convert activations into the layout expected by the next layer.

        Parameters
        ----------
        x : ITensor
            Activations produced by the previous layer.
        layer : ILayer
            The layer receiving the converted activations.

        Returns
        -------
        ITensor
            Activations in the receiving layer's layout.
        """
        ...

    def backprop(self, output: ITensor, layer: ILayer) -> ITensor:
        """
        Convert an error signal back into the previous layer's layout.

        Parameters
        ----------
        output : ITensor
            Error (epsilon) tensor in the receiving layer's layout.
        layer : ILayer
            The receiving layer; supplies the recorded mini-batch size.

        Returns
        -------
        ITensor
            Error tensor in the previous layer's layout.
        """
        ...

    def clone(self) -> "IInputPreProcessor":
        """
        Return an independent preprocessor with identical configuration.
        """
        ...

    def get_config(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable configuration dictionary.
        """
        ...
