"""Configuration loading & validation.

Precedence (last wins): base.yaml → overrides.local.yaml → ENV (MODKERNEL__*).

The validated `StartupConfiguration` is also the object modules receive as
`Module.configuration` (resolved through the IoC collaborator). Unknown keys
are rejected.
"""
from __future__ import annotations

import logging
import os
import pathlib
import threading
from functools import lru_cache
from typing import Any, Dict, Type

import yaml
from pydantic import BaseModel, ConfigDict

from modkernel import metrics
from modkernel.errors import validate_error_type

from .schemas.core import ModulesConfig, PlugInsConfig
from .schemas.observability import LoggingConfig

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMA_VERSION = 1


class StartupConfiguration(BaseModel):
    schema_version: int = SUPPORTED_SCHEMA_VERSION
    modules: ModulesConfig = ModulesConfig()
    plugins: PlugInsConfig = PlugInsConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = ConfigDict(extra="forbid")


DEFAULT_CONFIG_DIR = "configs"
ENV_PREFIX = "MODKERNEL__"

SUB_SCHEMA_CLASSES: Dict[str, Type[BaseModel]] = {
    "modules": ModulesConfig,
    "plugins": PlugInsConfig,
    "logging": LoggingConfig,
}


class ConfigError(Exception):
    pass


def _load_yaml_if_exists(path: pathlib.Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _merge_dict(
    base: Dict[str, Any], override: Dict[str, Any]
) -> Dict[str, Any]:
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            base[k] = _merge_dict(base[k], v)
        else:
            base[k] = v
    return base


def _cast_env_value(value: str) -> Any:
    if value.lower() in {"true", "false"}:
        return value.lower() == "true"
    try:
        return int(value)
    except ValueError:
        try:
            return float(value)
        except ValueError:
            return value


def _apply_env(cfg: Dict[str, Any]) -> None:
    prefix_len = len(ENV_PREFIX)
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        path_parts = env_key[prefix_len:].lower().split("__")
        target = cfg
        for part in path_parts[:-1]:
            if part not in target or not isinstance(target[part], dict):
                target[part] = {}
            target = target[part]
        target[path_parts[-1]] = _cast_env_value(value)
        dotted_path = ".".join(path_parts)
        metrics.inc("env_override_total", {"path": dotted_path})
        logger.info("config env override path=%s source=env", dotted_path)


_lock = threading.Lock()


def _resolve_config_dir() -> pathlib.Path:
    """Resolve config directory each call honoring env var changes."""
    return pathlib.Path(os.getenv("MODKERNEL_CONFIG_DIR", DEFAULT_CONFIG_DIR))


def _validate_sub_schemas(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Validate each known section via its schema class."""
    validated: Dict[str, Any] = {}
    for name, cls in SUB_SCHEMA_CLASSES.items():
        if name in raw:
            try:
                validated[name] = cls.model_validate(raw[name] or {})
            except Exception as e:  # noqa: BLE001
                metrics.inc(
                    "config_validation_errors_total",
                    {"path": name, "code": validate_error_type("config-invalid")},
                )
                raise ConfigError(
                    f"Validation failed for section '{name}': {e}"
                ) from e
    return validated


def _check_schema_version(raw: Dict[str, Any]) -> None:
    version = raw.setdefault("schema_version", SUPPORTED_SCHEMA_VERSION)
    if version != SUPPORTED_SCHEMA_VERSION:
        metrics.inc(
            "config_validation_errors_total",
            {
                "path": "schema_version",
                "code": validate_error_type("config-out-of-range"),
            },
        )
        raise ConfigError(
            f"config validation failed: schema_version:{version} "
            f"(supported: {SUPPORTED_SCHEMA_VERSION})"
        )


@lru_cache(maxsize=1)
def get_config() -> StartupConfiguration:  # noqa: D401
    with _lock:
        cfg_dir = _resolve_config_dir()
        base_cfg = _load_yaml_if_exists(cfg_dir / "base.yaml")
        overrides_cfg = _load_yaml_if_exists(cfg_dir / "overrides.local.yaml")
        merged = _merge_dict(base_cfg, overrides_cfg)
        _apply_env(merged)
        _check_schema_version(merged)
        validated_sub = _validate_sub_schemas(merged)
        try:
            cfg = StartupConfiguration.model_validate(
                {**merged, **validated_sub}
            )
        except Exception as e:  # noqa: BLE001
            raise ConfigError(str(e)) from e
        return cfg


def clear_config_cache() -> None:
    """Clear cached config (primarily for tests)."""
    get_config.cache_clear()


def as_dict() -> Dict[str, Any]:
    return get_config().model_dump()
