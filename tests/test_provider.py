from __future__ import annotations

import threading

import pytest

from svcreg_core.api import ServiceLifetime
from svcreg_core.errors import ProviderConstructionError
from svcreg_core.registry import ServiceRegistry
from testclasses.contracts import CounterService, NamedService, TeapotService
from testclasses.providers import (
    FormalGreeter,
    NamedServiceA,
    SingletonTeapot,
    SlowCounter,
    Teapot,
)


def test_provider_name_and_lifetime_defaults() -> None:
    registry = ServiceRegistry(scanners={})
    provider = registry.new_service(TeapotService).new_provider(Teapot)

    assert provider.name == "testclasses.providers.Teapot"
    assert provider.lifetime is ServiceLifetime.TRANSIENT
    assert provider.metadata is None
    assert provider.priority == 0


def test_provider_metadata_is_read_from_the_decorator() -> None:
    registry = ServiceRegistry(scanners={})
    provider = registry.new_service(NamedService).new_provider(NamedServiceA)

    assert provider.name == "NamedServiceA"
    assert provider.priority == 1
    assert not provider.is_singleton


def test_transient_provider_builds_a_new_instance_each_time() -> None:
    registry = ServiceRegistry(scanners={})
    provider = registry.new_service(TeapotService).new_provider(Teapot)

    first = provider.get_instance()
    second = provider.get_instance()

    assert first is not second
    assert first.token != second.token


def test_singleton_provider_returns_the_same_instance() -> None:
    registry = ServiceRegistry(scanners={})
    provider = registry.new_service(TeapotService).new_provider(SingletonTeapot)

    first = provider.get_instance()
    second = provider.get_instance()

    assert provider.is_singleton
    assert first is second
    assert first.token == second.token


def test_singleton_first_access_is_race_free() -> None:
    SlowCounter.created = 0
    registry = ServiceRegistry(scanners={})
    provider = registry.new_service(CounterService).new_provider(SlowCounter)
    barrier = threading.Barrier(8)
    results: list[object] = []
    results_lock = threading.Lock()

    def worker() -> None:
        barrier.wait()
        instance = provider.get_instance()
        with results_lock:
            results.append(instance)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert SlowCounter.created == 1
    assert len(results) == 8
    assert all(instance is results[0] for instance in results)


def test_construction_failure_is_wrapped() -> None:
    class Failing(TeapotService):
        def __init__(self) -> None:
            raise ValueError("no water")

        def brew(self) -> str:
            return ""

    registry = ServiceRegistry(scanners={})
    provider = registry.new_service(TeapotService).new_provider(Failing)

    with pytest.raises(ProviderConstructionError) as excinfo:
        provider.get_instance()
    assert excinfo.value.concrete_type is Failing
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_providers_compare_by_service_type_and_name() -> None:
    registry = ServiceRegistry(scanners={})
    service = registry.new_service(TeapotService)

    assert service.new_provider(Teapot) == service.new_provider(Teapot)
    assert service.new_provider(Teapot) != service.new_provider(SingletonTeapot)
    assert "SingletonTeapot" in repr(service.new_provider(SingletonTeapot))


def test_provider_requires_a_class() -> None:
    registry = ServiceRegistry(scanners={})
    service = registry.new_service(TeapotService)

    with pytest.raises(TypeError):
        service.new_provider(FormalGreeter())  # type: ignore[arg-type]
