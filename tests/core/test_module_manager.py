import pytest

from modkernel import metrics
from modkernel.config import StartupConfiguration
from modkernel.errors import InitializationError
from modkernel.events import on
from modkernel.modules import KernelModule, Module, ModuleManager, depends_on
from modkernel.plugins import PlugInManager, TypeListPlugInSource

CALLS = []


@pytest.fixture(autouse=True)
def _reset_calls():
    CALLS.clear()
    yield
    CALLS.clear()


class Recording(Module):
    def pre_initialize(self):
        CALLS.append(("pre", type(self).__name__))

    def initialize(self):
        CALLS.append(("init", type(self).__name__))

    def post_initialize(self):
        CALLS.append(("post", type(self).__name__))

    def shutdown(self):
        CALLS.append(("shutdown", type(self).__name__))


@depends_on(KernelModule)
class M1(Recording):
    pass


@depends_on(M1)
class M2(Recording):
    pass


class Extra(Recording):
    pass


class Exploding(Recording):
    def initialize(self):
        raise RuntimeError("boom")


@depends_on(Exploding)
class AfterExploding(Recording):
    pass


class Impostor(Module):
    pass


class NotAModule:
    pass


def _manager(ioc, *plugin_types):
    plugins = PlugInManager()
    if plugin_types:
        plugins.add_source(TypeListPlugInSource(*plugin_types))
    return ModuleManager(ioc, plugins)


def _names(modules):
    return [m.type.__name__ for m in modules]


def test_initialize_loads_discovered_modules(ioc):
    mm = _manager(ioc)
    mm.initialize(M2)
    assert _names(mm.modules) == ["KernelModule", "M2", "M1"]
    assert mm.startup_module.type is M2
    assert mm.startup_module.instance is ioc.instances[M2]
    assert [d.type for d in mm.startup_module.dependencies] == [M1]


def test_instances_receive_ioc_and_configuration(ioc):
    mm = _manager(ioc)
    mm.initialize(M1)
    for info in mm.modules:
        assert info.instance.ioc_manager is ioc
        assert isinstance(info.instance.configuration, StartupConfiguration)
        assert info.instance.configuration is ioc.config


def test_registration_skips_already_registered_types(ioc):
    ioc.register(M1)
    mm = _manager(ioc)
    mm.initialize(M2)
    assert ioc.registered.count(M1) == 1
    assert set(ioc.registered) == {M1, M2, KernelModule}


def test_start_runs_three_global_passes_in_dependency_order(ioc):
    mm = _manager(ioc)
    mm.initialize(M2)
    mm.start_modules()
    assert CALLS == [
        ("pre", "M1"),
        ("pre", "M2"),
        ("init", "M1"),
        ("init", "M2"),
        ("post", "M1"),
        ("post", "M2"),
    ]


def test_shutdown_is_reverse_of_start_order(ioc):
    mm = _manager(ioc)
    mm.initialize(M2)
    mm.shutdown_modules()
    assert CALLS == [("shutdown", "M2"), ("shutdown", "M1")]


def test_plugin_modules_loaded_and_flagged(ioc):
    mm = _manager(ioc, Extra, M1)
    mm.initialize(M2)
    names = _names(mm.modules)
    assert names == ["KernelModule", "M2", "M1", "Extra"]
    flags = {m.type.__name__: m.is_loaded_as_plugin for m in mm.modules}
    assert flags == {"KernelModule": False, "M2": False, "M1": False, "Extra": True}
    counters = metrics.snapshot()["counters"]
    assert counters.get("modules_loaded_total{plugin=true}") == 1
    assert counters.get("modules_loaded_total{plugin=false}") == 3


def test_resolved_object_that_is_not_a_module_is_fatal(ioc):
    class WrongIoc(type(ioc)):
        def resolve(self, service_type):
            if service_type is Impostor:
                return NotAModule()
            return super().resolve(service_type)

    wrong = WrongIoc()
    mm = ModuleManager(wrong, PlugInManager())
    with pytest.raises(InitializationError) as ei:
        mm.initialize(Impostor)
    assert ei.value.error_type == "not-a-module"
    assert "Impostor" in str(ei.value)


def test_non_module_plugin_candidate_fails_creation(ioc):
    mm = _manager(ioc, NotAModule)
    with pytest.raises(InitializationError) as ei:
        mm.initialize(M1)
    assert "NotAModule" in str(ei.value)


def test_missing_declared_dependency_aborts_loading(ioc, monkeypatch):
    class Ghost(Module):
        pass

    @depends_on(Ghost)
    class Haunted(Module):
        pass

    from modkernel.modules import discovery

    # Ghost never discovered: simulate a module that was not loaded
    monkeypatch.setattr(
        discovery,
        "find_depended_module_types_recursively",
        lambda t: [Haunted, KernelModule],
    )
    mm = _manager(ioc)
    with pytest.raises(InitializationError) as ei:
        mm.initialize(Haunted)
    assert ei.value.error_type == "module-not-found"
    assert "Ghost" in str(ei.value) and "Haunted" in str(ei.value)
    assert mm.startup_module.type is Haunted


def test_failing_phase_aborts_remaining_passes(ioc):
    failures = []
    on(lambda n, p: failures.append(p) if n == "LifecyclePhaseFailed" else None)
    mm = _manager(ioc)
    mm.initialize(AfterExploding)
    with pytest.raises(RuntimeError, match="boom"):
        mm.start_modules()
    assert ("pre", "AfterExploding") in CALLS
    assert ("init", "AfterExploding") not in CALLS
    assert not any(c[0] == "post" for c in CALLS)
    assert failures[0]["phase"] == "initialize"
    assert failures[0]["module"].endswith("Exploding")
    assert failures[0]["error_type"] == "lifecycle-phase-failed"


def test_lifecycle_events_and_metrics(ioc):
    seen = []
    on(lambda n, p: seen.append((n, p)))
    mm = _manager(ioc)
    mm.initialize(M2)
    mm.start_modules()
    mm.shutdown_modules()
    phases = [p["phase"] for n, p in seen if n == "LifecyclePhaseCompleted"]
    assert phases == ["pre_initialize", "initialize", "post_initialize", "shutdown"]
    loaded = [p for n, p in seen if n == "ModulesLoaded"]
    assert loaded[0]["count"] == 3
    assert loaded[0]["startup_module"].endswith("M2")
    hist = metrics.snapshot()["histograms"]
    assert hist["lifecycle_phase_ms{phase=initialize}"]["count"] == 1
