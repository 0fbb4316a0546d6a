"""
Gradient update primitives for LayerFlow.

Re-exports the update rule (`RmsProp`) and the per-layer coordinators
(`BaseUpdater`, `RmsPropUpdater`) together with the gradient normalization
entry point used before the rules run.
"""

from .optimizers._rmsprop import RmsProp
from .updater._base_updater import BaseUpdater
from .updater._rmsprop_updater import RmsPropUpdater
from .updater._gradient_normalization import normalize_gradients

__all__ = [
    RmsProp.__name__,
    BaseUpdater.__name__,
    RmsPropUpdater.__name__,
    normalize_gradients.__name__,
]
