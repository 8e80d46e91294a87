"""Plugin units and the sources that supply them.

A plugin unit is anything with a `name` and a `get_types()` that lists its
candidate types. Enumeration may fail (bad import, syntax error); discovery
logs that and moves on to the next unit.
"""
from __future__ import annotations

import importlib
from pathlib import Path
from typing import Dict, List, Protocol, Sequence, runtime_checkable

from modkernel.reflection import get_unit_types


@runtime_checkable
class PlugInUnit(Protocol):
    name: str

    def get_types(self) -> List[type]:
        ...


@runtime_checkable
class PlugInSource(Protocol):
    def get_units(self) -> List[PlugInUnit]:
        ...


class ImportedUnit:
    """Python module imported on first enumeration."""

    def __init__(self, name: str) -> None:
        self.name = name

    def get_types(self) -> List[type]:
        return get_unit_types(importlib.import_module(self.name))

    def __repr__(self) -> str:
        return f"ImportedUnit({self.name!r})"


class TypeListUnit:
    """Unit whose types are listed up front instead of introspected."""

    def __init__(self, name: str, types: Sequence[type]) -> None:
        self.name = name
        self._types = list(types)

    def get_types(self) -> List[type]:
        return list(self._types)

    def __repr__(self) -> str:
        return f"TypeListUnit({self.name!r}, {len(self._types)} types)"


class UnitListPlugInSource:
    def __init__(self, *unit_names: str) -> None:
        self.unit_names = list(unit_names)

    def get_units(self) -> List[PlugInUnit]:
        return [ImportedUnit(n) for n in self.unit_names]


class TypeListPlugInSource:
    """Groups the given types into one unit per defining Python module."""

    def __init__(self, *types: type) -> None:
        self.types = list(types)

    def get_units(self) -> List[PlugInUnit]:
        grouped: Dict[str, List[type]] = {}
        for t in self.types:
            grouped.setdefault(t.__module__, []).append(t)
        return [TypeListUnit(name, ts) for name, ts in grouped.items()]


class ManifestPlugInSource:
    """Units listed in YAML manifests found in `directory`."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def get_units(self) -> List[PlugInUnit]:
        from .manifest import load_plugin_manifests

        units: List[PlugInUnit] = []
        for manifest in load_plugin_manifests(self.directory).values():
            if not manifest.enabled:
                continue
            units.extend(ImportedUnit(n) for n in manifest.units)
        return units


__all__ = [
    "PlugInUnit",
    "PlugInSource",
    "ImportedUnit",
    "TypeListUnit",
    "UnitListPlugInSource",
    "TypeListPlugInSource",
    "ManifestPlugInSource",
]
