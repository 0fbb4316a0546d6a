"""
Domain-level gradient updater contracts for LayerFlow.

Two contracts are defined here:

- `IGradientUpdater`: a stateful rule that turns the raw gradient of one
  parameter tensor into the step to apply (e.g., RMSProp).
- `IUpdater`: the per-layer coordinator that owns one `IGradientUpdater` per
  parameter variable and creates them lazily.

Notes
-----
- Domain contracts are backend-agnostic and must not depend on NumPy or
  infrastructure implementations.
- Coordinators are scoped to a single layer instance; replicas trained in
  parallel must each own a distinct coordinator.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol, runtime_checkable

from ._tensor import ITensor
from ._layer import ILayer


@runtime_checkable
class IGradientUpdater(Protocol):
    """
    Stateful per-parameter update rule.

    The rule maps ``(raw gradient, rule memory)`` to
    ``(adjusted gradient, updated memory)``. Hyperparameters are fixed at
    construction; only the numeric memory evolves.
    """

    def check_gradient(self, gradient: ITensor) -> None:
        """
        Raise if `gradient` cannot be consumed by this rule. Never mutates.
        """
        ...

    def get_gradient(self, gradient: ITensor) -> ITensor:
        """
        Consume one raw gradient and return the adjusted step.

        Implementations must validate the gradient shape before mutating
        any internal memory.
        """
        ...

    @property
    def memory(self) -> Optional[ITensor]:
        """
        Return the current rule memory, or None before the first call.
        """
        ...

    def reset(self) -> None:
        """
        Drop the rule memory so the next call starts from its initial state.
        """
        ...


@runtime_checkable
class IUpdater(Protocol):
    """
    Per-layer update coordinator contract.

    Required methods
    ----------------
    - `get_or_create()` resolves (and lazily builds) the rule of a variable.
    - `apply()` resolves the rule and returns the adjusted gradient.
    - `update()` applies a whole gradient table for one layer.
    - `clear()` drops every cached rule.
    """

    def get_or_create(
        self, variable: str, gradient: ITensor, layer: ILayer
    ) -> IGradientUpdater: ...

    def apply(self, variable: str, gradient: ITensor, layer: ILayer) -> ITensor: ...

    def update(
        self, layer: ILayer, gradients: Mapping[str, ITensor]
    ) -> Mapping[str, ITensor]: ...

    def clear(self) -> None: ...

    def variables(self) -> Iterable[str]: ...
