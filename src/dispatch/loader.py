"""Locate a strategy class inside a user-supplied Python file."""
from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from typing import List, Optional, Type, Union

from .interface import DispatchStrategy

logger = logging.getLogger(__name__)


class StrategyLoadError(LookupError):
    """Raised when a dispatch strategy cannot be found or instantiated."""


def load_strategy_file(
    path: Union[str, Path], class_name: Optional[str] = None, **options
) -> DispatchStrategy:
    """Import ``path`` and instantiate the strategy it defines.

    Only classes defined in that file are considered. A file must hold
    exactly one :class:`DispatchStrategy` subclass unless ``class_name``
    picks one explicitly.
    """

    file_path = Path(path)
    if not file_path.is_file():
        raise StrategyLoadError(f"Algorithm file not found: {file_path}")

    module_name = f"_elevator_strategy_{file_path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    if spec is None or spec.loader is None:
        raise StrategyLoadError(f"Cannot import algorithm file: {file_path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise StrategyLoadError(f"Failed to load algorithm file {file_path}: {exc}") from exc

    candidates = _strategy_classes(module)
    if class_name is not None:
        matches = [cls for cls in candidates if cls.__name__ == class_name]
        if not matches:
            raise StrategyLoadError(f"No algorithm class named {class_name!r} in {file_path}")
        strategy_cls = matches[0]
    elif not candidates:
        raise StrategyLoadError(
            f"No algorithm class found in {file_path}. Must subclass dispatch.DispatchStrategy"
        )
    elif len(candidates) > 1:
        names = ", ".join(cls.__name__ for cls in candidates)
        raise StrategyLoadError(
            f"Multiple algorithm classes found in {file_path} ({names}). Only one per file allowed"
        )
    else:
        strategy_cls = candidates[0]

    try:
        strategy = strategy_cls(**options)
    except Exception as exc:
        raise StrategyLoadError(f"Error creating algorithm instance: {exc}") from exc
    logger.info("Loaded strategy %s from %s", strategy_cls.__name__, file_path)
    return strategy


def _strategy_classes(module) -> List[Type[DispatchStrategy]]:
    return [
        obj
        for _, obj in inspect.getmembers(module, inspect.isclass)
        if issubclass(obj, DispatchStrategy)
        and obj.__module__ == module.__name__
        and not inspect.isabstract(obj)
    ]
