"""Module discovery: declared dependency walk + plugin unit merge."""
from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from modkernel.errors import InitializationError, map_exception
from modkernel.events import PlugInUnitSkipped, emit
from modkernel.plugins.sources import PlugInUnit

from .base import find_depended_module_types, is_module, qualified_name
from .kernel import KernelModule

logger = logging.getLogger(__name__)


def _add_module_and_dependencies(found: List[type], module_type: type) -> None:
    # preorder walk over a stack of dependency iterators
    pending = [iter((module_type,))]
    while pending:
        for t in pending[-1]:
            if not is_module(t):
                raise InitializationError(
                    "This type is not a module: " + qualified_name(t),
                    error_type="not-a-module",
                )
            if t in found:
                continue
            found.append(t)
            pending.append(iter(find_depended_module_types(t)))
            break
        else:
            pending.pop()


def find_depended_module_types_recursively(module_type: type) -> List[type]:
    """`module_type` first, then everything it declares, transitively.

    The kernel module is appended when nothing declared it.
    """
    found: List[type] = []
    _add_module_and_dependencies(found, module_type)
    if KernelModule not in found:
        found.append(KernelModule)
    return found


def add_plugin_modules(found: List[type], units: Iterable[PlugInUnit]) -> List[type]:
    """Merge plugin candidates into `found`; return types only plugins gave.

    A candidate is appended when it is a module or not yet present, so a
    module type already found is appended again. Callers de-duplicate.
    """
    declared = set(found)
    plugin_types: List[type] = []
    for unit in units:
        try:
            candidates = list(unit.get_types())
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "Could not get types in plugin unit: %s", unit.name, exc_info=True
            )
            emit(
                PlugInUnitSkipped(
                    unit=unit.name,
                    error_type=map_exception(e, "discovery"),
                    message=str(e),
                )
            )
            continue
        for t in candidates:
            if is_module(t) or t not in found:
                found.append(t)
                if t not in declared and t not in plugin_types:
                    plugin_types.append(t)
    return plugin_types


def find_all_module_types(
    startup_module: type, plugin_units: Iterable[PlugInUnit]
) -> Tuple[List[type], List[type]]:
    modules = find_depended_module_types_recursively(startup_module)
    plugin_types = add_plugin_modules(modules, plugin_units)
    return modules, plugin_types


__all__ = [
    "find_depended_module_types_recursively",
    "add_plugin_modules",
    "find_all_module_types",
]
