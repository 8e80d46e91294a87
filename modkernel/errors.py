"""Central error taxonomy for module loading and lifecycle."""
from __future__ import annotations

_ALLOWED_ERROR_TYPES = {
    # discovery / creation
    "not-a-module",
    "module-not-found",
    "plugin-unit-unreadable",
    "plugin-manifest-invalid",
    # ordering
    "dependency-cycle",
    # lifecycle
    "lifecycle-phase-failed",
    # config
    "config-invalid",
    "config-out-of-range",
}


def validate_error_type(code: str) -> str:
    assert (
        code in _ALLOWED_ERROR_TYPES
    ), f"Unknown error_type '{code}' (not in taxonomy)"
    return code


class InitializationError(Exception):
    """Raised when modules cannot be loaded, linked or ordered.

    ``error_type`` is one of the taxonomy codes above and is carried along
    so observers can classify failures without parsing the message.
    """

    def __init__(self, message: str, error_type: str = "not-a-module"):
        super().__init__(message)
        self.error_type = validate_error_type(error_type)


def map_exception(e: Exception, phase: str) -> str:
    if isinstance(e, InitializationError):
        return e.error_type
    if phase == "discovery":
        return "plugin-unit-unreadable"
    return "lifecycle-phase-failed"


__all__ = ["InitializationError", "validate_error_type", "map_exception"]
