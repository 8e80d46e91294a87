"""Unit introspection: which Python module a type lives in, what it imports.

A "unit" is the importable Python module that defines a module class. Unit
references are read statically from the unit's source with `ast`, so
nothing is executed beyond what is already imported.
"""
from __future__ import annotations

import ast
import inspect
import sys
import types
from functools import lru_cache
from pathlib import Path
from typing import List, Tuple


def unit_of(module_type: type) -> str:
    return module_type.__module__


def get_unit_types(unit: types.ModuleType) -> List[type]:
    """Classes defined in `unit` itself, in definition order."""
    return [
        obj
        for obj in vars(unit).values()
        if inspect.isclass(obj) and obj.__module__ == unit.__name__
    ]


def _source_path(unit_name: str) -> Path | None:
    mod = sys.modules.get(unit_name)
    file = getattr(mod, "__file__", None)
    if not file or not file.endswith(".py"):
        return None
    return Path(file)


def _resolve_relative(unit_name: str, is_package: bool, node: ast.ImportFrom) -> str | None:
    parts = unit_name.split(".")
    if not is_package:
        parts = parts[:-1]
    up = node.level - 1
    if up > len(parts):
        return None
    if up:
        parts = parts[:-up]
    if node.module:
        parts = parts + node.module.split(".")
    return ".".join(parts) or None


def _is_type_checking(test: ast.expr) -> bool:
    if isinstance(test, ast.Name):
        return test.id == "TYPE_CHECKING"
    return isinstance(test, ast.Attribute) and test.attr == "TYPE_CHECKING"


def _module_level_imports(body: List[ast.stmt]):
    """Import statements that run when the unit is imported.

    Descends into top-level `if`/`try` blocks but not into functions or
    classes; `if TYPE_CHECKING:` bodies are type-only and skipped.
    """
    for stmt in body:
        if isinstance(stmt, (ast.Import, ast.ImportFrom)):
            yield stmt
        elif isinstance(stmt, ast.If):
            if not _is_type_checking(stmt.test):
                yield from _module_level_imports(stmt.body)
            yield from _module_level_imports(stmt.orelse)
        elif isinstance(stmt, ast.Try):
            yield from _module_level_imports(stmt.body)
            for handler in stmt.handlers:
                yield from _module_level_imports(handler.body)
            yield from _module_level_imports(stmt.orelse)
            yield from _module_level_imports(stmt.finalbody)


@lru_cache(maxsize=None)
def find_referenced_units(unit_name: str) -> Tuple[str, ...]:
    """Names of units imported by `unit_name` at import time, in source order.

    `from x import y` contributes both `x` and `x.y` since `y` may be a
    submodule. Imports inside functions, classes and `if TYPE_CHECKING:`
    blocks are not runtime references and are ignored. The unit itself is
    never included.
    """
    path = _source_path(unit_name)
    if path is None:
        return ()
    try:
        tree = ast.parse(path.read_text(encoding="utf-8"))
    except (OSError, SyntaxError):
        return ()
    is_package = path.name == "__init__.py"
    found: dict[str, None] = {}
    for node in _module_level_imports(tree.body):
        if isinstance(node, ast.Import):
            for n in node.names:
                found[n.name] = None
        elif isinstance(node, ast.ImportFrom):
            if node.level:
                base = _resolve_relative(unit_name, is_package, node)
            else:
                base = node.module
            if not base:
                continue
            found[base] = None
            for n in node.names:
                if n.name != "*":
                    found[f"{base}.{n.name}"] = None
    found.pop(unit_name, None)
    return tuple(found)


def clear_reference_cache() -> None:
    find_referenced_units.cache_clear()


__all__ = [
    "unit_of",
    "get_unit_types",
    "find_referenced_units",
    "clear_reference_cache",
]
