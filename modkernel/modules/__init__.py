"""Modules package.

Runtime module system:
 - Module base class + depends_on declarations
 - ModuleInfo descriptors held in a ModuleCollection
 - Discovery (declared walk + plugin units) and dependency resolution
 - ModuleManager: load, order (kernel first) and run lifecycle passes
"""
from __future__ import annotations

from .base import (  # noqa: F401
    Module,
    depends_on,
    find_depended_module_types,
    is_module,
)
from .collection import ModuleCollection, sort_by_dependencies  # noqa: F401
from .discovery import (  # noqa: F401
    find_all_module_types,
    find_depended_module_types_recursively,
)
from .info import ModuleInfo  # noqa: F401
from .kernel import KernelModule  # noqa: F401
from .manager import ModuleManager  # noqa: F401
from .resolver import DependencyResolver  # noqa: F401

__all__ = [
    "Module",
    "KernelModule",
    "depends_on",
    "is_module",
    "find_depended_module_types",
    "find_depended_module_types_recursively",
    "find_all_module_types",
    "ModuleInfo",
    "ModuleCollection",
    "sort_by_dependencies",
    "DependencyResolver",
    "ModuleManager",
]
