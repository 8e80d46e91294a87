"""Module descriptor: one discovered module and its dependency edges."""
from __future__ import annotations

from typing import List

from modkernel.reflection import unit_of

from .base import Module, qualified_name
from .kernel import KernelModule


class ModuleInfo:
    __slots__ = ("type", "unit", "_instance", "dependencies", "is_loaded_as_plugin")

    def __init__(
        self,
        module_type: type,
        instance: Module,
        is_loaded_as_plugin: bool = False,
    ):
        self.type = module_type
        self.unit = unit_of(module_type)
        self._instance = instance
        # edges A -> B mean "A depends on B"; filled after all infos exist
        self.dependencies: List[ModuleInfo] = []
        self.is_loaded_as_plugin = is_loaded_as_plugin

    @property
    def instance(self) -> Module:
        return self._instance

    @property
    def is_kernel(self) -> bool:
        return self.type is KernelModule

    def add_dependency(self, other: "ModuleInfo") -> bool:
        if other is self or other.type is self.type:
            return False
        if any(d.type is other.type for d in self.dependencies):
            return False
        self.dependencies.append(other)
        return True

    def __repr__(self) -> str:
        return f"ModuleInfo({qualified_name(self.type)})"

    def __str__(self) -> str:
        return qualified_name(self.type)


__all__ = ["ModuleInfo"]
