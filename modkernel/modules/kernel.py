"""The kernel module: always loaded, always first, always shut down last."""
from __future__ import annotations

from .base import Module


class KernelModule(Module):
    def pre_initialize(self) -> None:
        self.logger.debug("kernel pre-initialize")

    def initialize(self) -> None:
        self.logger.debug("kernel initialize")

    def post_initialize(self) -> None:
        self.logger.debug("kernel post-initialize")

    def shutdown(self) -> None:
        self.logger.debug("kernel shutdown")


__all__ = ["KernelModule"]
