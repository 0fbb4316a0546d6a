from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Type

_PREPROCESSOR_REGISTRY: dict[str, Type[Any]] = {}


def register_preprocessor(
    name: Optional[str] = None,
) -> Callable[[Type[Any]], Type[Any]]:
    """
    Decorator to register a preprocessor class for config deserialization.
    """

    def deco(cls: Type[Any]) -> Type[Any]:
        key = name or cls.__name__
        _PREPROCESSOR_REGISTRY[key] = cls
        return cls

    return deco


def preprocessor_to_config(p: Any) -> Dict[str, Any]:
    """
    Convert a preprocessor into a JSON-serializable node.

    Node format
    -----------
    {
      "type": "RnnToCnnPreProcessor",
      "config": {...}
    }
    """
    get_cfg = getattr(p, "get_config", None)
    cfg = get_cfg() if callable(get_cfg) else {}
    return {"type": p.__class__.__name__, "config": cfg}


def preprocessor_from_config(node: Dict[str, Any]) -> Any:
    """
    Rebuild a preprocessor from a node produced by `preprocessor_to_config`.
    """
    type_name = str(node["type"])
    if type_name not in _PREPROCESSOR_REGISTRY:
        raise ValueError(
            f"Unknown preprocessor type '{type_name}'. "
            f"Register it via @register_preprocessor."
        )

    cls = _PREPROCESSOR_REGISTRY[type_name]
    cfg = node.get("config", {}) or {}

    from_cfg = getattr(cls, "from_config", None)
    if callable(from_cfg):
        return from_cfg(cfg)
    return cls(**cfg)
