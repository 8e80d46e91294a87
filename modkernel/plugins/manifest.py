"""Plugin manifests: YAML files naming the units a plugin contributes.

Example (`plugins/reporting.yaml`)::

    id: reporting
    units: [acme.reporting.module, acme.reporting.export]
    enabled: true
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from yaml import YAMLError

from modkernel.errors import InitializationError
from modkernel.events import PlugInUnitSkipped, emit

logger = logging.getLogger(__name__)


class PlugInManifest(BaseModel):
    id: str
    units: List[str] = Field(default_factory=list)
    enabled: bool = True
    description: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("id")
    @classmethod
    def _id_not_empty(cls, v: str) -> str:  # noqa: D401
        if not v.strip():
            raise ValueError("id cannot be empty")
        return v


_registry_lock = threading.Lock()
_manifest_cache: Dict[Path, Dict[str, PlugInManifest]] = {}


def _iter_manifest_files(directory: Path):
    for pattern in ("*.yaml", "*.yml"):
        for path in sorted(directory.glob(pattern)):
            if path.is_file():
                yield path


def _load_manifest_file(path: Path) -> PlugInManifest:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, YAMLError) as e:
        raise InitializationError(
            f"Invalid plugin manifest {path.name}: {e}",
            error_type="plugin-manifest-invalid",
        ) from e
    try:
        return PlugInManifest(**data)
    except Exception as e:  # noqa: BLE001
        raise InitializationError(
            f"Invalid plugin manifest {path.name}: {e}",
            error_type="plugin-manifest-invalid",
        ) from e


def load_plugin_manifests(directory: str | Path) -> Dict[str, PlugInManifest]:
    """Load all manifests into an index keyed by id (thread-safe cache).

    An unreadable or invalid file is logged, reported as
    `PlugInUnitSkipped` and left out. Two files claiming the same id raise
    `InitializationError`.
    """
    root = Path(directory).resolve()
    with _registry_lock:
        if root in _manifest_cache:
            return _manifest_cache[root]
        if not root.exists():
            _manifest_cache[root] = {}
            return _manifest_cache[root]
        index: Dict[str, PlugInManifest] = {}
        for mf in _iter_manifest_files(root):
            try:
                manifest = _load_manifest_file(mf)
            except InitializationError as e:
                logger.warning("Skipping plugin manifest %s: %s", mf, e)
                emit(
                    PlugInUnitSkipped(
                        unit=str(mf), error_type=e.error_type, message=str(e)
                    )
                )
                continue
            if manifest.id in index:
                raise InitializationError(
                    f"Duplicate plugin id in manifests: {manifest.id}",
                    error_type="plugin-manifest-invalid",
                )
            index[manifest.id] = manifest
        _manifest_cache[root] = index
        return index


def clear_manifest_cache(directory: str | Path | None = None) -> None:
    """Clear cached manifest index.

    If directory provided, clear only that entry; else clear all.
    """
    with _registry_lock:
        if directory is None:
            _manifest_cache.clear()
        else:
            _manifest_cache.pop(Path(directory).resolve(), None)


__all__ = [
    "PlugInManifest",
    "load_plugin_manifests",
    "clear_manifest_cache",
]
