"""Minimal in-memory metrics collector.

Purpose:
    - Counters and latency samples for module loading and lifecycle passes.
    - Zero external deps; can be swapped by an exporter later.

Core API (intentionally tiny):
    inc(name, labels=None, value=1)
    observe(name, value, labels=None)
    snapshot() -> dict (copy for safe reading)

Thread-safety: coarse RLock; overhead negligible for startup-time volume.

Metric names (documented for discoverability):
    - modules_loaded_total{plugin}
    - plugin_unit_failures_total
    - lifecycle_phase_total{phase}
    - lifecycle_phase_ms{phase}            (histogram)
    - lifecycle_phase_failures_total{phase}
    - env_override_total{path}
    - events_emitted_total{event}, handler_exceptions_total{event}
"""
from __future__ import annotations

from threading import RLock
from time import time
from typing import Dict, Tuple, Any

_COUNTERS: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], float] = {}
_HIST: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], list] = {}
_LOCK = RLock()


def _norm_labels(labels: dict[str, Any] | None) -> Tuple[Tuple[str, str], ...]:
    if not labels:
        return tuple()
    return tuple(sorted((str(k), str(v)) for k, v in labels.items()))


def _label_str(labels: Tuple[Tuple[str, str], ...]) -> str:
    if not labels:
        return ""
    return "{" + ",".join(f"{k}={v}" for k, v in labels) + "}"


def inc(
    name: str,
    labels: dict[str, Any] | None = None,
    value: float = 1.0,
) -> None:
    key = (name, _norm_labels(labels))
    with _LOCK:
        _COUNTERS[key] = _COUNTERS.get(key, 0.0) + value


def observe(
    name: str,
    value: float,
    labels: dict[str, Any] | None = None,
) -> None:
    key = (name, _norm_labels(labels))
    with _LOCK:
        _HIST.setdefault(key, []).append(value)


def snapshot() -> dict[str, Any]:
    with _LOCK:
        counters: dict[str, float] = {}
        for (name, labels), v in _COUNTERS.items():
            counters[name + _label_str(labels)] = v
        hist = {}
        for (name, labels), vals in _HIST.items():
            if not vals:
                continue
            hist[name + _label_str(labels)] = {
                "count": len(vals),
                "min": min(vals),
                "max": max(vals),
                "p50": sorted(vals)[len(vals) // 2],
                "last": vals[-1],
            }
        return {
            "ts": time(),
            "counters": counters,
            "histograms": hist,
        }


def reset_for_tests() -> None:  # pragma: no cover
    with _LOCK:
        _COUNTERS.clear()
        _HIST.clear()


__all__ = [
    "inc",
    "observe",
    "snapshot",
    "reset_for_tests",
]


# ------------------- Helper wrappers -------------------

def inc_modules_loaded(plugin: bool) -> None:
    """Count one created module descriptor (plugin=true|false)."""
    inc("modules_loaded_total", {"plugin": str(plugin).lower()})


def inc_plugin_unit_failure() -> None:
    """Count a plugin unit skipped because it could not be introspected."""
    inc("plugin_unit_failures_total")


def observe_lifecycle_phase(phase: str, duration_ms: float) -> None:
    """Record one completed lifecycle pass over all modules."""
    inc("lifecycle_phase_total", {"phase": phase})
    observe("lifecycle_phase_ms", duration_ms, {"phase": phase})


__all__ += [
    "inc_modules_loaded",
    "inc_plugin_unit_failure",
    "observe_lifecycle_phase",
]
