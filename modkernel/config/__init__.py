"""Config subsystem public API.

Provides:
    get_config() -> StartupConfiguration
    as_dict()    -> dict representation
    ConfigError  -> raised on validation / unknown key
"""

from .loader import (  # noqa: F401
    get_config,
    as_dict,
    ConfigError,
    StartupConfiguration,
    clear_config_cache,
)
from .schemas.core import ModulesConfig, PlugInsConfig  # noqa: F401
from .schemas.observability import LoggingConfig  # noqa: F401


__all__ = [
    "get_config",
    "as_dict",
    "ConfigError",
    "StartupConfiguration",
    "ModulesConfig",
    "PlugInsConfig",
    "LoggingConfig",
    "clear_config_cache",
]
