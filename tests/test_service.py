from __future__ import annotations

import gc

import pytest

from svcreg_core.errors import AssignabilityViolationError, RegistryError
from svcreg_core.registry import ServiceRegistry
from svcreg_core.service import Service
from testclasses.contracts import GreetingService, TeapotService
from testclasses.providers import (
    DefaultGreeter,
    FormalGreeter,
    LoudGreeter,
    NotATeapot,
    Teapot,
)


def _service(contract: type, *providers: type, enforce: bool | None = None) -> tuple[ServiceRegistry, Service]:
    registry = ServiceRegistry(scanners={})
    service = registry.new_service(contract, enforce)
    for provider in providers:
        service.append_provider(service.new_provider(provider))
    return registry, service


def test_appending_the_same_provider_twice_keeps_one() -> None:
    registry, service = _service(TeapotService, Teapot)

    assert service.append_provider(service.new_provider(Teapot)) is False
    assert service.has_provider(Teapot)
    assert len(service.providers()) == 1
    assert registry is service.registry


def test_marked_provider_beats_unmarked_provider() -> None:
    _, service = _service(GreetingService, DefaultGreeter, FormalGreeter)

    assert service.get_provider().concrete_type is FormalGreeter


def test_highest_priority_marked_provider_wins() -> None:
    _, service = _service(GreetingService, FormalGreeter, LoudGreeter)

    assert service.get_provider().concrete_type is LoudGreeter


def test_priority_ties_go_to_the_first_discovered() -> None:
    _, first = _service(GreetingService, DefaultGreeter)
    assert first.get_provider().concrete_type is DefaultGreeter

    registry = ServiceRegistry(scanners={})
    service = registry.new_service(GreetingService)
    formal = service.new_provider(FormalGreeter)
    service.append_provider(formal)
    for _ in range(3):
        assert service.get_provider() is formal


def test_get_provider_by_name() -> None:
    _, service = _service(GreetingService, DefaultGreeter, FormalGreeter)

    assert service.get_provider("formal").concrete_type is FormalGreeter
    assert service.get_provider("testclasses.providers.DefaultGreeter").concrete_type is DefaultGreeter
    assert service.get_provider("missing") is None


def test_empty_service_has_no_provider() -> None:
    _, service = _service(GreetingService)

    assert service.get_provider() is None
    assert service.providers() == ()


def test_enforcement_follows_the_service_not_the_registry() -> None:
    registry = ServiceRegistry(enforce_assignability=False, scanners={})
    strict = registry.new_service(TeapotService, enforce_assignability=True)
    with pytest.raises(AssignabilityViolationError) as excinfo:
        strict.new_provider(NotATeapot)
    assert excinfo.value.concrete_type is NotATeapot
    assert excinfo.value.contract is TeapotService

    registry = ServiceRegistry(enforce_assignability=True, scanners={})
    lenient = registry.new_service(TeapotService, enforce_assignability=False)
    provider = lenient.new_provider(NotATeapot)
    assert provider.concrete_type is NotATeapot


def test_service_defaults_to_registry_enforcement() -> None:
    registry = ServiceRegistry(enforce_assignability=True, scanners={})

    assert registry.new_service(TeapotService).enforce_assignability is True


def test_services_compare_by_contract() -> None:
    registry = ServiceRegistry(scanners={})

    assert registry.new_service(TeapotService) == registry.new_service(TeapotService)
    assert registry.new_service(TeapotService) != registry.new_service(GreetingService)
    assert len({registry.new_service(TeapotService), registry.new_service(TeapotService)}) == 1


def test_service_rejects_non_class_contract() -> None:
    registry = ServiceRegistry(scanners={})

    with pytest.raises(TypeError):
        Service("TeapotService", registry)  # type: ignore[arg-type]


def test_service_outliving_its_registry_reports_it() -> None:
    service = ServiceRegistry(scanners={}).new_service(TeapotService)
    gc.collect()

    with pytest.raises(RegistryError):
        service.registry
