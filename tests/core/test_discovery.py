import logging

from modkernel import metrics
from modkernel.events import on
from modkernel.modules import KernelModule, Module, depends_on, find_all_module_types
from modkernel.modules.discovery import (
    add_plugin_modules,
    find_depended_module_types_recursively,
)
from modkernel.plugins import TypeListUnit


class Core(Module):
    pass


@depends_on(Core)
class Startup(Module):
    pass


class M3(Module):
    pass


class M4(Module):
    pass


class Helper:
    pass


class BrokenUnit:
    name = "plugins.broken"

    def get_types(self):
        raise ImportError("cannot import plugins.broken")


def test_broken_plugin_unit_is_skipped_with_warning(caplog):
    seen = []
    on(lambda name, payload: seen.append((name, payload)))
    units = [
        BrokenUnit(),
        TypeListUnit("plugins.m3", [M3]),
        TypeListUnit("plugins.m4", [M4]),
    ]
    with caplog.at_level(logging.WARNING, logger="modkernel"):
        found, plugin_types = find_all_module_types(Startup, units)
    assert found == [Startup, Core, KernelModule, M3, M4]
    assert plugin_types == [M3, M4]
    assert any("plugins.broken" in r.getMessage() for r in caplog.records)
    skipped = [p for n, p in seen if n == "PlugInUnitSkipped"]
    assert skipped and skipped[0]["unit"] == "plugins.broken"
    assert skipped[0]["error_type"] == "plugin-unit-unreadable"
    counters = metrics.snapshot()["counters"]
    assert counters.get("plugin_unit_failures_total") == 1


def test_plugin_module_already_declared_is_appended_again():
    found = [Startup, Core, KernelModule]
    plugin_types = add_plugin_modules(found, [TypeListUnit("p", [Core])])
    assert found == [Startup, Core, KernelModule, Core]
    assert plugin_types == []


def test_non_module_candidate_added_only_when_absent():
    found = [Startup]
    add_plugin_modules(found, [TypeListUnit("p", [Helper])])
    assert found == [Startup, Helper]
    add_plugin_modules(found, [TypeListUnit("p", [Helper])])
    assert found == [Startup, Helper]


class LazyUnit:
    """Yields one module, then fails the way a half-imported unit does."""

    name = "plugins.lazy"

    def get_types(self):
        yield M3
        raise ImportError("corrupt unit")


def test_unit_failing_midway_through_enumeration_is_skipped():
    seen = []
    on(lambda name, payload: seen.append((name, payload)))
    units = [LazyUnit(), TypeListUnit("plugins.m4", [M4])]
    found, plugin_types = find_all_module_types(Startup, units)
    # nothing from the failed unit is kept, not even what it yielded first
    assert found == [Startup, Core, KernelModule, M4]
    assert plugin_types == [M4]
    skipped = [p for n, p in seen if n == "PlugInUnitSkipped"]
    assert [p["unit"] for p in skipped] == ["plugins.lazy"]


def test_long_declared_chain_is_walked_without_recursion_limit():
    chain = [type("Link0", (Module,), {})]
    for i in range(1, 3000):
        chain.append(depends_on(chain[-1])(type(f"Link{i}", (Module,), {})))
    found = find_depended_module_types_recursively(chain[-1])
    assert found[:3] == [chain[-1], chain[-2], chain[-3]]
    assert found[-2:] == [chain[0], KernelModule]
    assert len(found) == 3001
