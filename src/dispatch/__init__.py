from __future__ import annotations

from typing import Callable, Dict, Type

from .fcfs import FirstComeFirstServedStrategy
from .interface import (
    FLOOR_EPSILON,
    Action,
    Assignment,
    CallView,
    Direction,
    DispatchStrategy,
    ElevatorSnapshot,
    ElevatorState,
    UserView,
)
from .loader import StrategyLoadError, load_strategy_file
from .nearest_idle import NearestIdleStrategy
from .scan import ScanStrategy

__all__ = [
    "DEFAULT_STRATEGY",
    "FLOOR_EPSILON",
    "STRATEGY_REGISTRY",
    "Action",
    "Assignment",
    "CallView",
    "Direction",
    "DispatchStrategy",
    "ElevatorSnapshot",
    "ElevatorState",
    "FirstComeFirstServedStrategy",
    "NearestIdleStrategy",
    "ScanStrategy",
    "StrategyLoadError",
    "UserView",
    "get_strategy",
    "load_strategy",
    "load_strategy_file",
    "register_strategy",
]

DEFAULT_STRATEGY = "nearest_idle"

STRATEGY_REGISTRY: Dict[str, Type[DispatchStrategy]] = {
    "nearest_idle": NearestIdleStrategy,
    "fcfs": FirstComeFirstServedStrategy,
    "scan": ScanStrategy,
}


def register_strategy(name: str) -> Callable[[Type[DispatchStrategy]], Type[DispatchStrategy]]:
    def decorator(cls: Type[DispatchStrategy]) -> Type[DispatchStrategy]:
        STRATEGY_REGISTRY[name.lower()] = cls
        return cls

    return decorator


def get_strategy(name: str, **kwargs) -> DispatchStrategy:
    cls = STRATEGY_REGISTRY.get(name.lower())
    if cls is None:
        raise StrategyLoadError(f"Unknown strategy '{name}'. Available: {', '.join(STRATEGY_REGISTRY)}")
    try:
        return cls(**kwargs)
    except TypeError as exc:
        raise StrategyLoadError(f"Invalid options for strategy '{name}': {exc}") from exc


def load_strategy(spec: str, **kwargs) -> DispatchStrategy:
    """Resolve a registered name, ``path.py`` or ``path.py:ClassName``."""

    stem, suffix, rest = spec.rpartition(".py")
    if suffix and (not rest or rest.startswith(":")):
        class_name = rest[1:] or None
        return load_strategy_file(stem + suffix, class_name, **kwargs)
    return get_strategy(spec, **kwargs)
