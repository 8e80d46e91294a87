"""IoC collaborator interface.

The container itself lives outside this package; the module manager only
needs registration checks, registration and resolution by type.
"""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IocResolver(Protocol):
    def is_registered(self, service_type: type) -> bool:
        ...

    def register(self, service_type: type) -> None:
        ...

    def resolve(self, service_type: type) -> Any:
        ...


__all__ = ["IocResolver"]
