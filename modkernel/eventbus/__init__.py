"""In-process event bus for module loading and lifecycle notifications.

Handlers subscribe by event name (`"ModuleLoaded"`, `"LifecyclePhaseFailed"`,
...) or with `"*"` to receive every event. Dispatch is synchronous on the
emitting thread, which is the thread running the module manager.

A raising handler never interrupts loading: the error is logged, counted as
`handler_exceptions_total{event}` and the next handler runs.

Metrics: events_emitted_total{event}, handler_exceptions_total{event},
event_dispatch_ms{event} (histogram).
"""
from __future__ import annotations

import logging
from threading import RLock
from time import perf_counter, time
from typing import Any, Callable, Dict, List

from modkernel import metrics

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]

ANY_EVENT = "*"


class EventBus:
    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}
        self._lock = RLock()

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        """Register `handler`; the returned callable removes it again."""
        with self._lock:
            self._handlers.setdefault(event, []).append(handler)
        return lambda: self.unsubscribe(event, handler)

    def unsubscribe(self, event: str, handler: Handler) -> bool:
        with self._lock:
            handlers = self._handlers.get(event)
            if not handlers or handler not in handlers:
                return False
            handlers.remove(handler)
            if not handlers:
                del self._handlers[event]
            return True

    def subscriber_count(self, event: str) -> int:
        with self._lock:
            return len(self._handlers.get(event, ()))

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        payload.setdefault("ts", time())
        with self._lock:
            targets = list(self._handlers.get(event, ()))
            targets += self._handlers.get(ANY_EVENT, ())
        metrics.inc("events_emitted_total", {"event": event})
        started = perf_counter()
        for handler in targets:
            try:
                handler(dict(payload))
            except Exception:  # noqa: BLE001
                logger.debug("Handler for %s raised", event, exc_info=True)
                metrics.inc("handler_exceptions_total", {"event": event})
        metrics.observe(
            "event_dispatch_ms", (perf_counter() - started) * 1000, {"event": event}
        )

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()


_BUS = EventBus()


def subscribe(event: str, handler: Handler) -> Callable[[], None]:
    return _BUS.subscribe(event, handler)


def unsubscribe(event: str, handler: Handler) -> bool:
    return _BUS.unsubscribe(event, handler)


def emit(event: str, payload: Dict[str, Any]) -> None:
    _BUS.emit(event, payload)


def reset_for_tests() -> None:  # pragma: no cover
    _BUS.clear()


__all__ = [
    "ANY_EVENT",
    "EventBus",
    "emit",
    "subscribe",
    "unsubscribe",
    "reset_for_tests",
]
