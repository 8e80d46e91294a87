"""Pytest configuration ensuring project root is importable.

Adds repository root to sys.path explicitly to avoid interpreter/path quirks.
"""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _isolate_config_env():  # noqa: D401
    """Ensure global config/env side effects do not leak between tests.

    - Clear cached config between tests
    - Restore MODKERNEL_CONFIG_DIR to original value
    """
    from modkernel.config import clear_config_cache  # local import

    prev = os.environ.get("MODKERNEL_CONFIG_DIR")
    clear_config_cache()
    try:
        yield
    finally:
        clear_config_cache()
        if prev is None:
            os.environ.pop("MODKERNEL_CONFIG_DIR", None)
        else:
            os.environ["MODKERNEL_CONFIG_DIR"] = prev


@pytest.fixture(autouse=True)
def _isolate_events_and_metrics():
    from modkernel import eventbus, metrics
    from modkernel.events import reset_listeners_for_tests
    from modkernel.plugins import clear_manifest_cache

    reset_listeners_for_tests()
    eventbus.reset_for_tests()
    metrics.reset_for_tests()
    clear_manifest_cache()
    yield
    reset_listeners_for_tests()
    eventbus.reset_for_tests()


class FakeIocManager:
    """Singleton-per-type container standing in for the real IoC."""

    def __init__(self, config: Any = None) -> None:
        from modkernel.config import StartupConfiguration

        self.registered: list[type] = []
        self.instances: Dict[type, Any] = {}
        self.config = config or StartupConfiguration()
        self.config_type = StartupConfiguration

    def is_registered(self, service_type: type) -> bool:
        return service_type in self.registered or service_type is self.config_type

    def register(self, service_type: type) -> None:
        self.registered.append(service_type)

    def resolve(self, service_type: type) -> Any:
        if service_type is self.config_type:
            return self.config
        if service_type not in self.registered:
            raise KeyError(f"Service not registered: {service_type.__name__}")
        if service_type not in self.instances:
            self.instances[service_type] = service_type()
        return self.instances[service_type]


@pytest.fixture()
def ioc():
    return FakeIocManager()
