"""ModuleManager: loads, links, orders and drives modules.

Responsibilities:
 - Discover module types from the startup module and plugin units
 - Register each type with the IoC collaborator (skip if registered)
 - Resolve instances, inject `ioc_manager` / `configuration`
 - Link descriptors (unit references + `depends_on`)
 - Run pre_initialize / initialize / post_initialize as three full passes
   in dependency order; shutdown as one pass in reverse order

Everything runs synchronously on the caller's thread. A failing lifecycle
hook aborts the remaining calls and propagates unchanged.
"""
from __future__ import annotations

import logging
from time import perf_counter
from typing import List, Optional, Sequence, Tuple

from modkernel.config import StartupConfiguration
from modkernel.dependency import IocResolver
from modkernel.errors import InitializationError, map_exception
from modkernel.events import (
    LifecyclePhaseCompleted,
    LifecyclePhaseFailed,
    ModuleLoaded,
    ModulesLoaded,
    emit,
)
from modkernel.plugins import PlugInManager

from .base import Module, qualified_name
from .collection import ModuleCollection
from .discovery import find_all_module_types
from .info import ModuleInfo
from .resolver import DependencyResolver

logger = logging.getLogger(__name__)

START_PHASES = ("pre_initialize", "initialize", "post_initialize")
SHUTDOWN_PHASE = "shutdown"


class ModuleManager:
    def __init__(
        self,
        ioc_manager: IocResolver,
        plugin_manager: Optional[PlugInManager] = None,
        resolver: Optional[DependencyResolver] = None,
        configuration_type: type = StartupConfiguration,
    ):
        self._ioc_manager = ioc_manager
        self._plugin_manager = plugin_manager or PlugInManager()
        self._resolver = resolver or DependencyResolver()
        self._configuration_type = configuration_type
        self._modules = ModuleCollection()
        self._startup_module: Optional[ModuleInfo] = None

    @property
    def startup_module(self) -> Optional[ModuleInfo]:
        return self._startup_module

    @property
    def modules(self) -> Tuple[ModuleInfo, ...]:
        return tuple(self._modules)

    def initialize(self, startup_module: type) -> None:
        self._modules = ModuleCollection(startup_module)
        self._startup_module = None
        self._load_all_modules()

    def get_sorted_modules(self) -> List[ModuleInfo]:
        """Dependency order, kernel first; a new list on every call."""
        return self._modules.get_sorted_module_list_by_dependency()

    def start_modules(self) -> None:
        sorted_modules = self.get_sorted_modules()
        for phase in START_PHASES:
            self._run_phase(phase, sorted_modules)

    def shutdown_modules(self) -> None:
        logger.debug("Shutting down has been started")
        sorted_modules = self.get_sorted_modules()
        sorted_modules.reverse()
        self._run_phase(SHUTDOWN_PHASE, sorted_modules)
        logger.debug("Shutting down completed.")

    # --- loading ------------------------------------------------------------
    def _load_all_modules(self) -> None:
        logger.debug("Loading modules...")
        module_types, plugin_types = find_all_module_types(
            self._modules.startup_module_type,
            self._plugin_manager.get_plugin_units(),
        )
        # plugin merge may repeat a type; keep first occurrence
        module_types = list(dict.fromkeys(module_types))
        logger.debug("Found %d modules in total.", len(module_types))

        self._register_modules(module_types)
        self._create_modules(module_types, plugin_types)
        self._modules.ensure_kernel_to_be_first()
        self._resolver.set_dependencies(self._modules)

        logger.debug("%d modules loaded.", len(self._modules))
        emit(
            ModulesLoaded(
                startup_module=(
                    str(self._startup_module) if self._startup_module else None
                ),
                count=len(self._modules),
            )
        )

    def _register_modules(self, module_types: Sequence[type]) -> None:
        for module_type in module_types:
            if not self._ioc_manager.is_registered(module_type):
                self._ioc_manager.register(module_type)

    def _create_modules(
        self, module_types: Sequence[type], plugin_types: Sequence[type]
    ) -> None:
        plugin_set = set(plugin_types)
        for module_type in module_types:
            module_object = self._ioc_manager.resolve(module_type)
            if not isinstance(module_object, Module):
                raise InitializationError(
                    "This type is not a module: " + qualified_name(module_type),
                    error_type="not-a-module",
                )
            module_object.ioc_manager = self._ioc_manager
            module_object.configuration = self._ioc_manager.resolve(
                self._configuration_type
            )

            info = ModuleInfo(
                module_type,
                module_object,
                is_loaded_as_plugin=module_type in plugin_set,
            )
            self._modules.add(info)
            if module_type is self._modules.startup_module_type:
                self._startup_module = info

            logger.debug("Loaded module: %s", info)
            emit(
                ModuleLoaded(
                    module=str(info),
                    unit=info.unit,
                    plugin=info.is_loaded_as_plugin,
                )
            )

    # --- lifecycle ----------------------------------------------------------
    def _run_phase(self, phase: str, modules: List[ModuleInfo]) -> None:
        t0 = perf_counter()
        for info in modules:
            try:
                getattr(info.instance, phase)()
            except Exception as e:
                logger.error("Module %s failed in %s", info, phase)
                emit(
                    LifecyclePhaseFailed(
                        phase=phase,
                        module=str(info),
                        error_type=map_exception(e, phase),
                        message=str(e),
                    )
                )
                raise
        emit(
            LifecyclePhaseCompleted(
                phase=phase,
                modules=len(modules),
                duration_ms=int((perf_counter() - t0) * 1000),
            )
        )


__all__ = ["ModuleManager", "START_PHASES", "SHUTDOWN_PHASE"]
