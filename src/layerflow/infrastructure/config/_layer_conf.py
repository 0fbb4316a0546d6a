"""
Layer configuration record.

This module defines `LayerConf`, a single flat configuration record holding
the hyperparameters shared by every layer kind, and `GradientNormalization`,
the strategy applied to raw gradients before the update rule runs.

Design notes
------------
- One flat dataclass with optional fields replaces a per-layer-kind class
  hierarchy; layer kinds that do not use a field simply ignore it.
- Validation runs in `__post_init__`, so `dataclasses.replace()` validates
  too. Direct attribute assignment after construction is allowed (training
  code may adjust the learning rate), but update rules capture their
  hyperparameters once and never observe such changes.
- `get_config()` / `from_config()` follow the same JSON-friendly hook
  convention used by modules and preprocessors.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional

from typing_extensions import Self

from ...domain._errors import InvalidConfigurationError


class GradientNormalization(Enum):
    """
    Gradient normalization / clipping strategy.

    Members
    -------
    NONE
        Gradients are passed through unchanged.
    RENORMALIZE_L2_PER_LAYER
        Divide every gradient of the layer by the L2 norm of all of them.
    RENORMALIZE_L2_PER_PARAM_TYPE
        Divide each gradient by its own L2 norm.
    CLIP_ELEMENT_WISE_ABSOLUTE_VALUE
        Clip each element into ``[-threshold, threshold]``.
    CLIP_L2_PER_LAYER
        Rescale the layer's gradients if their joint L2 norm exceeds
        ``threshold``.
    CLIP_L2_PER_PARAM_TYPE
        Rescale each gradient whose own L2 norm exceeds ``threshold``.
    """

    NONE = "none"
    RENORMALIZE_L2_PER_LAYER = "renormalize_l2_per_layer"
    RENORMALIZE_L2_PER_PARAM_TYPE = "renormalize_l2_per_param_type"
    CLIP_ELEMENT_WISE_ABSOLUTE_VALUE = "clip_element_wise_absolute_value"
    CLIP_L2_PER_LAYER = "clip_l2_per_layer"
    CLIP_L2_PER_PARAM_TYPE = "clip_l2_per_param_type"


@dataclass
class LayerConf:
    """
    Hyperparameters of one layer.

    Parameters
    ----------
    learning_rate : float, optional
        Step size used by update rules. Must be > 0. Defaults to 1e-1.
    rms_decay : float, optional
        Decay rate of the squared-gradient moving average (RMSProp).
        Must be in [0, 1). Defaults to 0.95.
    epsilon : float, optional
        Numerical floor added to the update denominator. Must be >= 0.
        Defaults to 1e-8.
    l1 : float, optional
        L1 regularization coefficient. Must be >= 0. Defaults to 0.0.
    l2 : float, optional
        L2 regularization coefficient. Must be >= 0. Defaults to 0.0.
    gradient_normalization : GradientNormalization, optional
        Strategy applied to raw gradients. Defaults to NONE.
    gradient_normalization_threshold : float, optional
        Threshold for the clipping strategies. Defaults to 1.0.
    activation : Optional[str], optional
        Activation function name, informational only.
    name : Optional[str], optional
        Layer name, informational only.
    """

    learning_rate: float = 1e-1
    rms_decay: float = 0.95
    epsilon: float = 1e-8
    l1: float = 0.0
    l2: float = 0.0
    gradient_normalization: GradientNormalization = GradientNormalization.NONE
    gradient_normalization_threshold: float = 1.0
    activation: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """
        Coerce numeric fields and validate ranges.

        Raises
        ------
        InvalidConfigurationError
            If any hyperparameter is outside its valid range.
        """
        self.learning_rate = float(self.learning_rate)
        self.rms_decay = float(self.rms_decay)
        self.epsilon = float(self.epsilon)
        self.l1 = float(self.l1)
        self.l2 = float(self.l2)
        self.gradient_normalization_threshold = float(
            self.gradient_normalization_threshold
        )
        if not isinstance(self.gradient_normalization, GradientNormalization):
            self.gradient_normalization = _parse_normalization(
                self.gradient_normalization
            )

        if not (self.learning_rate > 0.0) or math.isinf(self.learning_rate):
            raise InvalidConfigurationError(
                "learning_rate", self.learning_rate, "must be a finite value > 0"
            )
        if not (0.0 <= self.rms_decay < 1.0):
            raise InvalidConfigurationError(
                "rms_decay", self.rms_decay, "must be in [0, 1)"
            )
        if not (self.epsilon >= 0.0):
            raise InvalidConfigurationError("epsilon", self.epsilon, "must be >= 0")
        if not (self.l1 >= 0.0):
            raise InvalidConfigurationError("l1", self.l1, "must be >= 0")
        if not (self.l2 >= 0.0):
            raise InvalidConfigurationError("l2", self.l2, "must be >= 0")

    def get_config(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable configuration dictionary.

        The normalization strategy is stored by its enum value string.
        """
        cfg: Dict[str, Any] = {}
        for f in fields(self):
            v = getattr(self, f.name)
            cfg[f.name] = v.value if isinstance(v, GradientNormalization) else v
        return cfg

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> Self:
        """
        Reconstruct a configuration from `get_config()` output.

        Unknown keys are rejected so that typos do not silently fall back to
        defaults.

        Raises
        ------
        InvalidConfigurationError
            If `cfg` contains an unknown key or an invalid value.
        """
        known = {f.name for f in fields(cls)}
        for k in cfg:
            if k not in known:
                raise InvalidConfigurationError(k, cfg[k], "unknown field")
        return cls(**dict(cfg))


def _parse_normalization(value: Any) -> GradientNormalization:
    if isinstance(value, str):
        key = value.strip()
        try:
            return GradientNormalization(key.lower())
        except ValueError:
            pass
        try:
            return GradientNormalization[key.upper()]
        except KeyError:
            pass
    raise InvalidConfigurationError(
        "gradient_normalization",
        value,
        f"expected one of {[m.value for m in GradientNormalization]}",
    )
