"""
RMSProp update coordinator.

`RmsPropUpdater` builds one `RmsProp` rule per parameter variable from the
owning layer's configuration (``learning_rate``, ``rms_decay``, ``epsilon``)
at the moment the variable's first gradient arrives.
"""

from __future__ import annotations

from ...domain._layer import ILayer
from ...domain._updater import IGradientUpdater
from ..optimizers._rmsprop import RmsProp
from ..tensor._tensor import Tensor
from ._base_updater import BaseUpdater


class RmsPropUpdater(BaseUpdater):
    """
    Update coordinator producing `RmsProp` rules.
    """

    def _create(self, variable: str, gradient: Tensor, layer: ILayer) -> RmsProp:
        conf = layer.conf
        return RmsProp(conf.learning_rate, conf.rms_decay, epsilon=conf.epsilon)

    def _is_stale(self, rule: IGradientUpdater, layer: ILayer) -> bool:
        conf = layer.conf
        return (
            getattr(rule, "learning_rate", None) != float(conf.learning_rate)
            or getattr(rule, "rms_decay", None) != float(conf.rms_decay)
            or getattr(rule, "epsilon", None) != float(conf.epsilon)
        )
