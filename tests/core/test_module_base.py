import abc

import pytest

from modkernel.errors import InitializationError
from modkernel.modules import (
    KernelModule,
    Module,
    ModuleInfo,
    depends_on,
    find_depended_module_types,
    find_depended_module_types_recursively,
    is_module,
)


class Storage(Module):
    pass


class Cache(Module):
    pass


@depends_on(Storage)
@depends_on(Cache, Storage)
class Web(Module):
    pass


class ExtendedWeb(Web):
    pass


@depends_on(Web)
class App(Module):
    pass


# declared cycle
class Ping(Module):
    pass


@depends_on(Ping)
class Pong(Module):
    pass


depends_on(Pong)(Ping)


class AbstractFeature(Module, abc.ABC):
    @abc.abstractmethod
    def feature(self):
        ...


class NotAModule:
    pass


def test_is_module_predicate():
    assert is_module(Storage)
    assert is_module(KernelModule)
    assert not is_module(Module)
    assert not is_module(AbstractFeature)
    assert not is_module(NotAModule)
    assert not is_module(Storage())
    assert not is_module("Storage")


def test_depends_on_stacking_dedupes_and_inherits():
    assert find_depended_module_types(Web) == [Cache, Storage]
    assert find_depended_module_types(ExtendedWeb) == [Cache, Storage]
    assert find_depended_module_types(Storage) == []


def test_find_depended_rejects_non_module():
    with pytest.raises(InitializationError) as ei:
        find_depended_module_types(NotAModule)
    assert ei.value.error_type == "not-a-module"
    assert "NotAModule" in str(ei.value)


def test_recursive_discovery_includes_start_and_kernel():
    found = find_depended_module_types_recursively(App)
    assert found == [App, Web, Cache, Storage, KernelModule]


def test_recursive_discovery_terminates_on_declared_cycle():
    found = find_depended_module_types_recursively(Ping)
    assert found == [Ping, Pong, KernelModule]


def test_kernel_not_duplicated_when_declared():
    @depends_on(KernelModule)
    class Local(Module):
        pass

    found = find_depended_module_types_recursively(Local)
    assert found.count(KernelModule) == 1


def test_module_info_dependencies_are_unique_and_never_self():
    web = ModuleInfo(Web, Web())
    storage = ModuleInfo(Storage, Storage())
    assert web.add_dependency(storage)
    assert not web.add_dependency(storage)
    assert not web.add_dependency(ModuleInfo(Storage, Storage()))
    assert not web.add_dependency(web)
    assert web.dependencies == [storage]


def test_module_info_identity_and_kernel_flag():
    kernel = ModuleInfo(KernelModule, KernelModule())
    web = ModuleInfo(Web, Web())
    assert kernel.is_kernel and not web.is_kernel
    assert web.unit == Web.__module__
    assert str(web).endswith(".Web")
    with pytest.raises(AttributeError):
        web.instance = Web()
