"""
Per-layer gradient update coordinator.

This module defines `BaseUpdater`, the owner of a layer's per-variable update
rules. It keeps an explicit ``variable name -> rule`` table and creates rules
lazily (insert-if-absent) the first time a variable's gradient is seen.

Design notes
------------
- A coordinator belongs to exactly one layer instance; there is no
  module-level cache. Replicas trained concurrently must own distinct
  coordinators.
- Rule hyperparameters are read from the layer configuration when the rule is
  created and are never re-read. If the live configuration diverges later, a
  `RuntimeWarning` is emitted and the captured values stay in effect.
- `update()` validates every gradient of the table before the first rule
  memory is mutated, so a rejected table leaves the coordinator unchanged.
- Subclasses only decide how to build a rule (`_create`) and how to detect
  that a cached rule no longer matches the live configuration (`_is_stale`).
"""

from __future__ import annotations

import warnings
from abc import abstractmethod
from typing import Dict, Iterator, List, Mapping

from ...domain._errors import ShapeMismatchError
from ...domain._layer import ILayer
from ...domain._updater import IGradientUpdater, IUpdater
from ..tensor._tensor import Tensor
from ._gradient_normalization import normalize_gradients


class BaseUpdater(IUpdater):
    """
    Lazily-populated table of per-variable update rules for one layer.

    Notes
    -----
    - At most one rule exists per variable name; insertion order is
      irrelevant.
    - `clear()` drops every rule, typically when the owning layer is
      reinitialized or cloned.
    """

    def __init__(self) -> None:
        self._updater_for_variable: Dict[str, IGradientUpdater] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(variables={sorted(self._updater_for_variable)})"

    def __len__(self) -> int:
        return len(self._updater_for_variable)

    def __contains__(self, variable: object) -> bool:
        return variable in self._updater_for_variable

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._updater_for_variable))

    def variables(self) -> List[str]:
        """
        Return the names of the variables that currently own a rule.
        """
        return list(self._updater_for_variable)

    @abstractmethod
    def _create(self, variable: str, gradient: Tensor, layer: ILayer) -> IGradientUpdater:
        """
        Build a fresh rule for `variable` from the layer's configuration.
        """

    def _is_stale(self, rule: IGradientUpdater, layer: ILayer) -> bool:
        """
        Return True if `rule`'s captured hyperparameters differ from the
        layer's live configuration.
        """
        return False

    def get_or_create(
        self, variable: str, gradient: Tensor, layer: ILayer
    ) -> IGradientUpdater:
        """
        Return the cached rule of `variable`, creating it if absent.

        Parameters
        ----------
        variable : str
            Parameter variable name, unique within the layer.
        gradient : Tensor
            Current raw gradient (used only to shape a new rule's memory).
        layer : ILayer
            Owning layer; its configuration seeds a new rule.

        Returns
        -------
        IGradientUpdater
            The rule bound to `variable`. Repeated calls return the same
            object until `clear()`.
        """
        return self._resolve(variable, gradient, layer, stacklevel=3)

    def _resolve(
        self, variable: str, gradient: Tensor, layer: ILayer, *, stacklevel: int
    ) -> IGradientUpdater:
        # `stacklevel` counts from this frame; public callers pass 3 so the
        # warning points at their own caller.
        rule = self._updater_for_variable.get(variable)
        if rule is None:
            rule = self._create(variable, gradient, layer)
            self._updater_for_variable[variable] = rule
        elif self._is_stale(rule, layer):
            warnings.warn(
                f"Layer configuration changed after the update rule for "
                f"'{variable}' was created; the hyperparameters captured at "
                f"creation remain in effect until the updater is cleared.",
                RuntimeWarning,
                stacklevel=stacklevel,
            )
        return rule

    def apply(self, variable: str, gradient: Tensor, layer: ILayer) -> Tensor:
        """
        Return the adjusted gradient for one variable.

        The rule is resolved through `get_or_create` and then invoked; the
        only side effect is the mutation of that rule's memory.

        Raises
        ------
        ShapeMismatchError
            If `gradient` does not match the shape of the rule's memory.
        """
        rule = self._resolve(variable, gradient, layer, stacklevel=3)
        return rule.get_gradient(gradient)

    def update(
        self, layer: ILayer, gradients: Mapping[str, Tensor]
    ) -> Dict[str, Tensor]:
        """
        Apply one optimization step to a whole gradient table.

        Steps
        -----
        1. Normalize / clip the raw gradients per the layer configuration.
        2. Validate every gradient against existing rule memory and against
           the shape of the layer's parameter of the same name. A parameter
           is required only when regularization is enabled.
        3. Run each variable's rule.
        4. Add ``l2 * p + l1 * sign(p)`` using the layer's current parameters.

        Parameters
        ----------
        layer : ILayer
            Layer owning the parameters.
        gradients : Mapping[str, Tensor]
            Raw gradients keyed by variable name.

        Returns
        -------
        Dict[str, Tensor]
            Adjusted gradients (steps) keyed by variable name.

        Raises
        ------
        ShapeMismatchError
            Raised before any rule memory is touched.
        KeyError
            If regularization is enabled and a variable has no parameter.
        """
        conf = layer.conf
        normalized = normalize_gradients(
            gradients,
            conf.gradient_normalization,
            conf.gradient_normalization_threshold,
        )

        regularize = conf.l1 > 0.0 or conf.l2 > 0.0
        params: Dict[str, Tensor] = {}
        for name, g in normalized.items():
            rule = self._updater_for_variable.get(name)
            if rule is not None:
                rule.check_gradient(g)
            try:
                p = layer.get_param(name)
            except KeyError:
                if regularize:
                    raise
                continue
            if p.shape != g.shape:
                raise ShapeMismatchError(p.shape, g.shape, op=f"update '{name}'")
            params[name] = p

        out: Dict[str, Tensor] = {}
        for name, g in normalized.items():
            rule = self._resolve(name, g, layer, stacklevel=3)
            step = rule.get_gradient(g)
            if regularize:
                p = params[name]
                if conf.l2 > 0.0:
                    step = step + (conf.l2 * p)
                if conf.l1 > 0.0:
                    step = step + (conf.l1 * p.sign())
            out[name] = step
        return out

    def clear(self) -> None:
        """
        Drop all cached rules; subsequent calls start from fresh state.
        """
        self._updater_for_variable.clear()
