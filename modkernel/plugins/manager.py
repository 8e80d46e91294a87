"""Plugin manager: the collaborator discovery asks for plugin units."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from modkernel.config import PlugInsConfig
from modkernel.errors import InitializationError, map_exception
from modkernel.events import PlugInUnitSkipped, emit

from .sources import (
    ManifestPlugInSource,
    PlugInSource,
    PlugInUnit,
    UnitListPlugInSource,
)

logger = logging.getLogger(__name__)


class PlugInSourceList(list):
    def get_all_units(self) -> List[PlugInUnit]:
        """Units of every source, first occurrence of each name kept.

        A source that fails to list its units is logged and skipped;
        `InitializationError` (e.g. duplicate manifest ids) propagates.
        """
        seen: Dict[str, PlugInUnit] = {}
        for source in self:
            try:
                units = list(source.get_units())
            except InitializationError:
                raise
            except Exception as e:  # noqa: BLE001
                logger.warning(
                    "Could not get units of plugin source: %r", source, exc_info=True
                )
                emit(
                    PlugInUnitSkipped(
                        unit=repr(source),
                        error_type=map_exception(e, "discovery"),
                        message=str(e),
                    )
                )
                continue
            for unit in units:
                seen.setdefault(unit.name, unit)
        return list(seen.values())


class PlugInManager:
    def __init__(self, sources: Optional[Iterable[PlugInSource]] = None) -> None:
        self.plugin_sources = PlugInSourceList(sources or ())

    def add_source(self, source: PlugInSource) -> None:
        self.plugin_sources.append(source)

    def get_plugin_units(self) -> List[PlugInUnit]:
        return self.plugin_sources.get_all_units()

    @classmethod
    def from_config(cls, cfg: PlugInsConfig) -> "PlugInManager":
        manager = cls()
        if cfg.units:
            manager.add_source(UnitListPlugInSource(*cfg.units))
        if cfg.manifest_dir:
            manager.add_source(ManifestPlugInSource(cfg.manifest_dir))
        return manager


__all__ = ["PlugInManager", "PlugInSourceList"]
