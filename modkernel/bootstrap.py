"""Bootstrapper: one-call startup and shutdown around ModuleManager."""
from __future__ import annotations

import importlib
import logging
from typing import Any, Optional

from modkernel.config import ConfigError, StartupConfiguration, get_config
from modkernel.dependency import IocResolver
from modkernel.modules import ModuleManager
from modkernel.plugins import PlugInManager

logger = logging.getLogger(__name__)


def locate(path: str) -> Any:
    """Resolve "pkg.mod:Class" or "pkg.mod.Class" to the object."""
    if ":" in path:
        module_name, attr = path.split(":", 1)
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ConfigError(f"Cannot locate '{path}': expected a dotted path")
    obj: Any = importlib.import_module(module_name)
    for part in attr.split("."):
        obj = getattr(obj, part)
    return obj


class Bootstrapper:
    def __init__(
        self,
        startup_module: type,
        ioc_manager: IocResolver,
        plugin_manager: Optional[PlugInManager] = None,
    ):
        self.startup_module = startup_module
        self.ioc_manager = ioc_manager
        self.plugin_manager = plugin_manager or PlugInManager()
        self.module_manager: Optional[ModuleManager] = None
        self._started = False

    @classmethod
    def create(
        cls,
        ioc_manager: IocResolver,
        startup_module: Optional[type] = None,
        config: Optional[StartupConfiguration] = None,
    ) -> "Bootstrapper":
        cfg = config or get_config()
        if startup_module is None:
            if not cfg.modules.startup:
                raise ConfigError("modules.startup is not configured")
            startup_module = locate(cfg.modules.startup)
        return cls(
            startup_module, ioc_manager, PlugInManager.from_config(cfg.plugins)
        )

    @property
    def started(self) -> bool:
        return self._started

    def initialize(self) -> None:
        logger.info("Starting modules from %s", self.startup_module.__qualname__)
        self.module_manager = ModuleManager(self.ioc_manager, self.plugin_manager)
        self.module_manager.initialize(self.startup_module)
        self.module_manager.start_modules()
        self._started = True

    def dispose(self) -> None:
        if not self._started or self.module_manager is None:
            return
        self._started = False
        self.module_manager.shutdown_modules()
        logger.info("Modules shut down")

    def __enter__(self) -> "Bootstrapper":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


__all__ = ["Bootstrapper", "locate"]
