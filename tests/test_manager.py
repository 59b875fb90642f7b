from __future__ import annotations

from typing import Iterator

import pytest

from svcreg_core.errors import ServiceNotFoundError
from svcreg_core.events import POST_SCAN_EVENT
from svcreg_core.filters import ClassFilters
from svcreg_core.manager import ServiceManager
from svcreg_core.registry import ServiceRegistry
from svcreg_core.scanner import MANIFEST_SCANNER, MODULE_SCANNER
from testclasses.contracts import GreetingService, TeapotService, UnregisteredService
from testclasses.providers import DefaultGreeter, LoudGreeter
from testclasses.scanners import FixtureScanner


@pytest.fixture(autouse=True)
def fresh_manager() -> Iterator[None]:
    ServiceManager.reset()
    yield
    ServiceManager.reset()


def _install_fixture_registry() -> ServiceRegistry:
    registry = ServiceRegistry(enforce_assignability=True, scanners={})
    registry.append_scanner(FixtureScanner.name, FixtureScanner)
    ServiceManager.use(registry)
    return registry


def test_default_registry_is_lazy_strict_and_unloaded() -> None:
    registry = ServiceManager.registry()

    assert registry is ServiceManager.registry()
    assert registry.enforce_assignability is True
    assert not ServiceManager.is_loaded()
    assert ServiceManager.scanner_names() == (MODULE_SCANNER, MANIFEST_SCANNER)


def test_reset_drops_the_shared_registry() -> None:
    first = ServiceManager.registry()

    ServiceManager.reset()

    assert ServiceManager.registry() is not first


def test_load_service_loads_on_first_use() -> None:
    _install_fixture_registry()

    greeter = ServiceManager.load_service(GreetingService)

    assert ServiceManager.is_loaded()
    assert isinstance(greeter, LoudGreeter)
    assert isinstance(
        ServiceManager.load_service(GreetingService, "testclasses.providers.DefaultGreeter"),
        DefaultGreeter,
    )
    with pytest.raises(ServiceNotFoundError):
        ServiceManager.load_service(UnregisteredService)


def test_manager_delegates_to_the_registry() -> None:
    registry = _install_fixture_registry()

    assert ServiceManager.load_scanner(FixtureScanner.name) is True
    assert ServiceManager.has_service(TeapotService)
    assert len(ServiceManager.load_all_services(GreetingService)) == 3

    ServiceManager.reload(ClassFilters.implements_interface(GreetingService))
    found = ServiceManager.find_services(ClassFilters.DEFAULT)
    assert {service.contract for service in found} == {GreetingService}

    ServiceManager.reload()
    assert ServiceManager.has_service(TeapotService)

    ServiceManager.set_enforce_assignability(False)
    assert registry.enforce_assignability is False

    ServiceManager.append_scanner("again", FixtureScanner)
    assert "again" in ServiceManager.scanner_names()


def test_load_is_a_no_op_once_loaded() -> None:
    registry = _install_fixture_registry()
    ServiceManager.load(ClassFilters.implements_interface(GreetingService))
    scans: list[str] = []
    registry.events.on(POST_SCAN_EVENT, lambda event: scans.append(event.payload["scanner"]))

    ServiceManager.load()

    assert scans == []
    assert not ServiceManager.has_service(TeapotService)

    ServiceManager.reload()

    assert scans == [FixtureScanner.name]
    assert ServiceManager.has_service(TeapotService)
