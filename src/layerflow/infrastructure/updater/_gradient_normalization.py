"""
Gradient normalization and clipping.

Applied by the update coordinator to a layer's raw gradient table before any
update rule runs. Every function returns a new table and leaves the input
tensors untouched.
"""

from __future__ import annotations

import math
import warnings
from typing import Dict, Mapping

from ..config._layer_conf import GradientNormalization
from ..tensor._tensor import Tensor

_CLIPPING_MODES = (
    GradientNormalization.CLIP_ELEMENT_WISE_ABSOLUTE_VALUE,
    GradientNormalization.CLIP_L2_PER_LAYER,
    GradientNormalization.CLIP_L2_PER_PARAM_TYPE,
)


def _layer_l2(gradients: Mapping[str, Tensor]) -> float:
    total = 0.0
    for g in gradients.values():
        n = g.norm2()
        total += n * n
    return math.sqrt(total)


def normalize_gradients(
    gradients: Mapping[str, Tensor],
    mode: GradientNormalization,
    threshold: float = 1.0,
) -> Dict[str, Tensor]:
    """
    Apply a gradient normalization strategy to a whole gradient table.

    Parameters
    ----------
    gradients : Mapping[str, Tensor]
        Raw gradients keyed by parameter variable name.
    mode : GradientNormalization
        Strategy to apply.
    threshold : float, optional
        Threshold used by the clipping strategies. Defaults to 1.0.

    Returns
    -------
    Dict[str, Tensor]
        A new table with the same keys.

    Notes
    -----
    - Zero-norm gradients are left unchanged by the renormalizing strategies
      instead of being divided by zero.
    - A clipping strategy with a non-positive threshold emits a
      `RuntimeWarning` and passes gradients through unchanged.
    """
    if mode is GradientNormalization.NONE:
        return dict(gradients)

    if mode in _CLIPPING_MODES and not (threshold > 0.0):
        warnings.warn(
            f"Gradient normalization {mode.name} requires a positive threshold, "
            f"got {threshold}; gradients are left unchanged.",
            RuntimeWarning,
            stacklevel=3,
        )
        return dict(gradients)

    if mode is GradientNormalization.RENORMALIZE_L2_PER_LAYER:
        l2 = _layer_l2(gradients)
        if l2 == 0.0:
            return dict(gradients)
        return {k: g / l2 for k, g in gradients.items()}

    if mode is GradientNormalization.RENORMALIZE_L2_PER_PARAM_TYPE:
        out: Dict[str, Tensor] = {}
        for k, g in gradients.items():
            n = g.norm2()
            out[k] = g / n if n != 0.0 else g
        return out

    if mode is GradientNormalization.CLIP_ELEMENT_WISE_ABSOLUTE_VALUE:
        return {k: g.clip(-threshold, threshold) for k, g in gradients.items()}

    if mode is GradientNormalization.CLIP_L2_PER_LAYER:
        l2 = _layer_l2(gradients)
        if l2 <= threshold:
            return dict(gradients)
        scale = threshold / l2
        return {k: g * scale for k, g in gradients.items()}

    if mode is GradientNormalization.CLIP_L2_PER_PARAM_TYPE:
        out = {}
        for k, g in gradients.items():
            n = g.norm2()
            out[k] = g * (threshold / n) if n > threshold else g
        return out

    raise ValueError(f"Unsupported gradient normalization: {mode!r}")
