"""Core schemas: startup module selection and plugin sources."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ModulesConfig(BaseModel):
    # dotted path, "pkg.mod:Class" or "pkg.mod.Class"
    startup: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class PlugInsConfig(BaseModel):
    units: List[str] = Field(default_factory=list)
    manifest_dir: Optional[str] = None

    model_config = ConfigDict(extra="forbid")
