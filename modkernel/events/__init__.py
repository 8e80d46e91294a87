"""Typed lifecycle events + any-subscriber bridge.

Event dataclasses are emitted through `modkernel.eventbus` (per-event
subscriptions) and also delivered to every handler registered with
`on(handler)`, where handler(name, payload) receives every event. The
built-in metrics collector is always the first any-subscriber.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from time import time
from typing import Any, Callable, Dict, List, Protocol

from modkernel import metrics as _metrics
from modkernel.eventbus import emit as _emit_bus

EventHandler = Callable[[str, Dict[str, Any]], None]


class SupportsEvent(Protocol):  # pragma: no cover
    def to_event(self) -> Dict[str, Any]:  # noqa: D401
        ...


@dataclass(slots=True)
class BaseEvent:
    def to_event(self) -> Dict[str, Any]:  # noqa: D401
        data = asdict(self)
        data["ts"] = data.get("ts") or time()
        return data


@dataclass(slots=True)
class ModuleLoaded(BaseEvent):
    module: str
    unit: str
    plugin: bool = False


@dataclass(slots=True)
class ModulesLoaded(BaseEvent):
    """All modules created and linked.

    startup_module: qualified name of the startup module type.
    count: number of descriptors in the collection.
    """
    startup_module: str | None
    count: int


@dataclass(slots=True)
class PlugInUnitSkipped(BaseEvent):
    """Plugin unit could not be introspected and was left out of discovery."""
    unit: str
    error_type: str
    message: str | None = None


@dataclass(slots=True)
class LifecyclePhaseCompleted(BaseEvent):
    phase: str  # pre_initialize|initialize|post_initialize|shutdown
    modules: int
    duration_ms: int


@dataclass(slots=True)
class LifecyclePhaseFailed(BaseEvent):
    phase: str
    module: str
    error_type: str
    message: str | None = None


_ANY_SUBS: List[EventHandler] = []


def _metrics_collector(
    name: str, payload: Dict[str, Any]
) -> None:  # noqa: D401
    if name == "ModuleLoaded":
        _metrics.inc_modules_loaded(bool(payload.get("plugin")))
    elif name == "PlugInUnitSkipped":
        _metrics.inc_plugin_unit_failure()
    elif name == "LifecyclePhaseCompleted":
        _metrics.observe_lifecycle_phase(
            payload.get("phase", "unknown"), payload.get("duration_ms", 0)
        )
    elif name == "LifecyclePhaseFailed":
        _metrics.inc(
            "lifecycle_phase_failures_total",
            {"phase": payload.get("phase", "unknown")},
        )


_ANY_SUBS.append(_metrics_collector)


def emit(ev: BaseEvent | SupportsEvent) -> None:
    name = ev.__class__.__name__
    payload = ev.to_event()
    _emit_bus(name, payload)
    for h in list(_ANY_SUBS):  # copy for isolation
        try:
            h(name, dict(payload))
        except Exception:  # noqa: BLE001
            _metrics.inc("handler_exceptions_total", {"event": name})


def on(handler: EventHandler) -> None:
    _ANY_SUBS.append(handler)


def subscribe(handler: EventHandler):
    on(handler)

    def _unsub() -> None:  # noqa: D401
        try:
            _ANY_SUBS.remove(handler)
        except ValueError:
            pass
    return _unsub


def reset_listeners_for_tests() -> None:  # pragma: no cover
    _ANY_SUBS.clear()
    _ANY_SUBS.append(_metrics_collector)


__all__ = [
    "emit",
    "on",
    "subscribe",
    "ModuleLoaded",
    "ModulesLoaded",
    "PlugInUnitSkipped",
    "LifecyclePhaseCompleted",
    "LifecyclePhaseFailed",
    "reset_listeners_for_tests",
]
