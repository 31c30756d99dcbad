"""Resolution of implementation names from configuration.

A configured implementation is either the name of a built-in implementation
or an import path of the form ``package.module:attribute``. The attribute may
be a :class:`MapImplementation` instance or a subclass with a no-argument
constructor.
"""

from __future__ import annotations

import importlib
import logging

from map_shootout.implementations.base import MapImplementation
from map_shootout.implementations.builtin import BUILTIN_IMPLEMENTATIONS

logger = logging.getLogger(__name__)


def resolve_implementation(spec: str) -> MapImplementation:
    """Resolve one configured implementation.

    Args:
        spec: Built-in name (e.g. ``dict``) or ``module:attribute`` path

    Returns:
        The resolved implementation

    Raises:
        ValueError: If the name is unknown or the import path is malformed
        TypeError: If the imported object is not a MapImplementation
    """
    if spec in BUILTIN_IMPLEMENTATIONS:
        return BUILTIN_IMPLEMENTATIONS[spec]

    if ":" not in spec:
        known = ", ".join(sorted(BUILTIN_IMPLEMENTATIONS))
        raise ValueError(
            f"Unknown implementation {spec!r}. Use one of [{known}] or a 'module:attribute' path"
        )

    module_name, _, attribute = spec.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Malformed implementation path: {spec!r}")

    module = importlib.import_module(module_name)
    try:
        target = getattr(module, attribute)
    except AttributeError as e:
        raise ValueError(f"Module {module_name!r} has no attribute {attribute!r}") from e

    if isinstance(target, type) and issubclass(target, MapImplementation):
        target = target()
    if not isinstance(target, MapImplementation):
        raise TypeError(f"{spec!r} is not a MapImplementation: {target!r}")

    logger.debug(f"Loaded implementation {target.name} from {spec}")
    return target


def resolve_implementations(specs: list[str]) -> list[MapImplementation]:
    """Resolve every configured implementation, rejecting duplicate names."""
    implementations = [resolve_implementation(spec) for spec in specs]
    names = [impl.name for impl in implementations]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate implementation names: {', '.join(duplicates)}")
    return implementations
