"""modkernel: module discovery, dependency ordering and lifecycle.

Typical use::

    from modkernel import Bootstrapper, Module, depends_on

    @depends_on(StorageModule)
    class AppModule(Module):
        def initialize(self):
            ...

    with Bootstrapper(AppModule, ioc) as boot:
        ...
"""
from __future__ import annotations

from .bootstrap import Bootstrapper, locate  # noqa: F401
from .errors import InitializationError  # noqa: F401
from .modules import (  # noqa: F401
    KernelModule,
    Module,
    ModuleInfo,
    ModuleManager,
    depends_on,
)

__all__ = [
    "Bootstrapper",
    "locate",
    "InitializationError",
    "KernelModule",
    "Module",
    "ModuleInfo",
    "ModuleManager",
    "depends_on",
]
