"""Logging setup for the `modkernel` logger tree.

Library code only calls `logging.getLogger(__name__)`; applications call
`configure_logging` once with the `logging` section of the configuration.
"""
from __future__ import annotations

import json
import logging

from modkernel.config import LoggingConfig

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_HANDLER_NAME = "modkernel"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "ts": record.created,
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def configure_logging(cfg: LoggingConfig | None = None) -> logging.Logger:
    cfg = cfg or LoggingConfig()
    root = logging.getLogger("modkernel")
    for h in list(root.handlers):
        if h.get_name() == _HANDLER_NAME:
            root.removeHandler(h)
    h = logging.StreamHandler()
    h.set_name(_HANDLER_NAME)
    if cfg.format == "json":
        h.setFormatter(JsonFormatter())
    else:
        h.setFormatter(
            logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
        )
    root.addHandler(h)
    root.setLevel(_LEVELS[cfg.level])
    return root


__all__ = ["configure_logging", "JsonFormatter"]
