"""Dependency resolver: links descriptors from unit references and
`depends_on` declarations."""
from __future__ import annotations

from typing import Callable, Iterable

from modkernel.errors import InitializationError
from modkernel.reflection import find_referenced_units

from .base import find_depended_module_types, qualified_name
from .collection import ModuleCollection
from .info import ModuleInfo

ReferenceFinder = Callable[[str], Iterable[str]]


class DependencyResolver:
    """Fills `ModuleInfo.dependencies` for every descriptor in a collection.

    Unit references are applied before `depends_on` declarations; a target
    reached both ways is linked once.
    """

    def __init__(self, reference_finder: ReferenceFinder = find_referenced_units):
        self._reference_finder = reference_finder

    def set_dependencies(self, modules: ModuleCollection) -> None:
        for info in modules:
            self.add_unit_dependencies(info, modules)
            self.add_declared_dependencies(info, modules)

    def add_unit_dependencies(self, info: ModuleInfo, modules: ModuleCollection) -> None:
        """Link to every module defined in a unit that `info.unit` imports."""
        for unit in self._reference_finder(info.unit):
            if unit == info.unit:
                continue
            for dep in modules.find_by_unit(unit):
                info.add_dependency(dep)

    def add_declared_dependencies(self, info: ModuleInfo, modules: ModuleCollection) -> None:
        """Link `depends_on` targets; each must already be in `modules`."""
        for dep_type in find_depended_module_types(info.type):
            dep = modules.find(dep_type)
            if dep is None:
                raise InitializationError(
                    "Could not find a depended module "
                    f"{qualified_name(dep_type)} for {qualified_name(info.type)}",
                    error_type="module-not-found",
                )
            info.add_dependency(dep)


__all__ = ["DependencyResolver"]
