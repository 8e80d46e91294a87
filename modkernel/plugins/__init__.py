"""Plugin sources: modules contributed from outside the startup module's
declared dependency tree."""
from __future__ import annotations

from .manager import PlugInManager, PlugInSourceList  # noqa: F401
from .manifest import (  # noqa: F401
    PlugInManifest,
    clear_manifest_cache,
    load_plugin_manifests,
)
from .sources import (  # noqa: F401
    ImportedUnit,
    ManifestPlugInSource,
    PlugInSource,
    PlugInUnit,
    TypeListPlugInSource,
    TypeListUnit,
    UnitListPlugInSource,
)

__all__ = [
    "PlugInManager",
    "PlugInSourceList",
    "PlugInManifest",
    "load_plugin_manifests",
    "clear_manifest_cache",
    "PlugInUnit",
    "PlugInSource",
    "ImportedUnit",
    "TypeListUnit",
    "UnitListPlugInSource",
    "TypeListPlugInSource",
    "ManifestPlugInSource",
]
