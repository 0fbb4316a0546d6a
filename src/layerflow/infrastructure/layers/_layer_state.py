"""
Minimal concrete layer state.

`LayerState` is the smallest object satisfying the domain `ILayer` contract:
it bundles a `LayerConf`, a named parameter table, the mini-batch size
recorded from the most recent input, and the layer's own update coordinator.

Concrete layer mathematics is not part of this object. Training loops (or
tests) feed it gradients and inputs; it owns the per-layer optimizer state so
that each layer instance carries an independent coordinator.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from ...domain._errors import ShapeMismatchError
from ..config._layer_conf import LayerConf
from ..tensor._tensor import Tensor
from ..updater._base_updater import BaseUpdater
from ..updater._rmsprop_updater import RmsPropUpdater


@dataclass
class LayerState:
    """
    Per-layer configuration, parameters and optimizer state.

    Attributes
    ----------
    conf : LayerConf
        Layer hyperparameters.
    params : Dict[str, Tensor]
        Trainable parameters keyed by variable name.
    input_mini_batch_size : Optional[int]
        Mini-batch size of the most recent input, or None.
    updater : BaseUpdater
        Update coordinator owned by this layer only.
    """

    conf: LayerConf = field(default_factory=LayerConf)
    params: Dict[str, Tensor] = field(default_factory=dict)
    input_mini_batch_size: Optional[int] = None
    updater: BaseUpdater = field(default_factory=RmsPropUpdater)

    def get_param(self, name: str) -> Tensor:
        """
        Return the parameter registered under `name`.

        Raises
        ------
        KeyError
            If no such parameter exists.
        """
        try:
            return self.params[name]
        except KeyError:
            raise KeyError(f"Layer has no parameter named '{name}'") from None

    def set_input(self, x: Tensor) -> None:
        """
        Record the mini-batch size (leading dimension) of an input tensor.
        """
        if len(x.shape) == 0:
            raise ShapeMismatchError("at least 1 dimension", x.shape, op="set_input")
        self.input_mini_batch_size = int(x.shape[0])

    def apply_gradients(self, gradients: Mapping[str, Tensor]) -> Dict[str, Tensor]:
        """
        Run one optimization step and subtract the steps from the parameters.

        Returns
        -------
        Dict[str, Tensor]
            The steps that were applied, keyed by variable name.
        """
        for name in gradients:
            self.get_param(name)
        steps = self.updater.update(self, gradients)
        for name, step in steps.items():
            p = self.params[name]
            p.copy_from(p - step)
        return steps

    def reinitialize(self) -> None:
        """
        Drop all optimizer state; the next step starts fresh.
        """
        self.updater.clear()

    def clone(self) -> "LayerState":
        """
        Return an independent copy with its own (empty) coordinator.
        """
        return LayerState(
            conf=copy.deepcopy(self.conf),
            params={k: v.clone() for k, v in self.params.items()},
            input_mini_batch_size=self.input_mini_batch_size,
            updater=type(self.updater)(),
        )
