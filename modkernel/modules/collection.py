"""Module collection: ordered registry of descriptors + dependency sort."""
from __future__ import annotations

from typing import Callable, Dict, Iterable, Iterator, List, Optional, TypeVar

from modkernel.errors import InitializationError

from .base import qualified_name
from .info import ModuleInfo

T = TypeVar("T")


def sort_by_dependencies(
    items: Iterable[T],
    get_dependencies: Callable[[T], Iterable[T]],
    describe: Callable[[T], str] = str,
) -> List[T]:
    """Return a new list where every item follows all of its dependencies.

    Depth-first; independent items keep their input order. A cycle raises
    `InitializationError` listing the cycle path.
    """
    result: List[T] = []
    done: set = set()

    for root in items:
        if root in done:
            continue
        path: List[T] = [root]
        on_path = {root}
        stack = [iter(get_dependencies(root))]
        while stack:
            for dep in stack[-1]:
                if dep in done:
                    continue
                if dep in on_path:
                    idx = path.index(dep)
                    cycle = " -> ".join(describe(p) for p in path[idx:] + [dep])
                    raise InitializationError(
                        f"Cyclic dependency found: {cycle}",
                        error_type="dependency-cycle",
                    )
                path.append(dep)
                on_path.add(dep)
                stack.append(iter(get_dependencies(dep)))
                break
            else:
                stack.pop()
                item = path.pop()
                on_path.discard(item)
                done.add(item)
                result.append(item)
    return result


class ModuleCollection:
    """Descriptors in discovery order, unique by module type."""

    def __init__(self, startup_module_type: Optional[type] = None) -> None:
        self.startup_module_type = startup_module_type
        self._items: List[ModuleInfo] = []
        self._by_type: Dict[type, ModuleInfo] = {}

    def add(self, info: ModuleInfo) -> bool:
        if info.type in self._by_type:
            return False
        self._items.append(info)
        self._by_type[info.type] = info
        return True

    def find(self, module_type: type) -> Optional[ModuleInfo]:
        return self._by_type.get(module_type)

    def find_by_unit(self, unit: str) -> List[ModuleInfo]:
        return [m for m in self._items if m.unit == unit]

    def __iter__(self) -> Iterator[ModuleInfo]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, module_type: object) -> bool:
        return module_type in self._by_type

    def get_sorted_module_list_by_dependency(self) -> List[ModuleInfo]:
        for info in self._items:
            for dep in info.dependencies:
                if self._by_type.get(dep.type) is not dep:
                    raise InitializationError(
                        f"Module {info} depends on {dep}, which is not in "
                        "the module collection",
                        error_type="module-not-found",
                    )
        sorted_modules = sort_by_dependencies(
            self._items,
            lambda m: m.dependencies,
            describe=lambda m: qualified_name(m.type),
        )
        self.ensure_kernel_module_to_be_first(sorted_modules)
        return sorted_modules

    def ensure_kernel_to_be_first(self) -> None:
        self.ensure_kernel_module_to_be_first(self._items)

    @staticmethod
    def ensure_kernel_module_to_be_first(modules: List[ModuleInfo]) -> None:
        """Move the kernel descriptor to index 0 in place, if present."""
        idx = next((i for i, m in enumerate(modules) if m.is_kernel), None)
        if idx is None or idx == 0:
            return
        modules.insert(0, modules.pop(idx))


__all__ = ["ModuleCollection", "sort_by_dependencies"]
