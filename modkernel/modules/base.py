"""Module base class and the `depends_on` declaration."""
from __future__ import annotations

import inspect
import logging
from typing import Any, List

from modkernel.errors import InitializationError

_DEPENDS_ON_ATTR = "__depends_on__"


class Module:
    """Base class of every loadable module.

    Subclasses override any of the four lifecycle hooks. The manager calls
    each hook once for every module: all `pre_initialize` calls happen
    before any `initialize`, all `initialize` before any `post_initialize`.
    `shutdown` runs in reverse dependency order.

    `ioc_manager` and `configuration` are injected by the manager right
    after the instance is resolved, before any hook runs.
    """

    ioc_manager: Any = None
    configuration: Any = None

    @property
    def logger(self) -> logging.Logger:
        cls = type(self)
        return logging.getLogger(f"{cls.__module__}.{cls.__qualname__}")

    def pre_initialize(self) -> None:
        """First pass: register conventions, tweak configuration."""

    def initialize(self) -> None:
        """Second pass: register own services."""

    def post_initialize(self) -> None:
        """Third pass: everything is registered; wire things together."""

    def shutdown(self) -> None:
        """Release resources; called in reverse dependency order."""


def depends_on(*module_types: type):
    """Class decorator declaring modules the decorated module depends on.

    Can be stacked; declarations are inherited by subclasses.
    """

    def _decorate(cls: type) -> type:
        own = list(cls.__dict__.get(_DEPENDS_ON_ATTR, ()))
        for t in module_types:
            if t not in own:
                own.append(t)
        setattr(cls, _DEPENDS_ON_ATTR, tuple(own))
        return cls

    return _decorate


def is_module(obj: Any) -> bool:
    """True for concrete `Module` subclasses (not `Module` itself)."""
    return (
        inspect.isclass(obj)
        and issubclass(obj, Module)
        and obj is not Module
        and not inspect.isabstract(obj)
    )


def qualified_name(t: type) -> str:
    """`package.module.Class` form used in logs and error messages."""
    return f"{t.__module__}.{t.__qualname__}"


def find_depended_module_types(module_type: type) -> List[type]:
    """Declared dependencies of `module_type` (own first, then bases)."""
    if not is_module(module_type):
        raise InitializationError(
            "This type is not a module: " + qualified_name(module_type),
            error_type="not-a-module",
        )
    found: List[type] = []
    for klass in module_type.__mro__:
        for t in klass.__dict__.get(_DEPENDS_ON_ATTR, ()):
            if t not in found:
                found.append(t)
    return found


__all__ = [
    "Module",
    "depends_on",
    "is_module",
    "qualified_name",
    "find_depended_module_types",
]
