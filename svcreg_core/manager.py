"""Process-wide registry holder for application entry points."""

from __future__ import annotations

import threading
from typing import Any, Callable

from .bootstrap import BootstrapOptions, bootstrap
from .filters import ClassFilter
from .registry import ServiceRegistry
from .scanner import ScannerFactory
from .service import Service


class ServiceManager:
    """Lazily bootstraps one shared registry (assignability enforced, not loaded).

    Library code should take a registry as an argument; this holder exists
    for application edges that need a single process-wide instance.
    """

    _lock = threading.RLock()
    _registry: ServiceRegistry | None = None

    @classmethod
    def registry(cls) -> ServiceRegistry:
        with cls._lock:
            if cls._registry is None:
                cls._registry = bootstrap(
                    BootstrapOptions(enforce_assignability=True, load_registry=False)
                )
            return cls._registry

    @classmethod
    def use(cls, registry: ServiceRegistry) -> None:
        """Install an already configured registry as the shared one."""

        with cls._lock:
            cls._registry = registry

    @classmethod
    def reset(cls) -> None:
        with cls._lock:
            cls._registry = None

    @classmethod
    def load(
        cls,
        service_filter: ClassFilter | None = None,
        provider_filter: ClassFilter | None = None,
    ) -> None:
        """Load the shared registry unless it is already loaded; use :meth:`reload` to rescan."""

        registry = cls.registry()
        with cls._lock:
            if not registry.is_loaded():
                registry.load(service_filter, provider_filter)

    @classmethod
    def load_scanner(
        cls,
        scanner_name: str,
        service_filter: ClassFilter | None = None,
        provider_filter: ClassFilter | None = None,
        enforce_assignability: bool | None = None,
    ) -> bool:
        return cls.registry().load_scanner(
            scanner_name, service_filter, provider_filter, enforce_assignability
        )

    @classmethod
    def reload(
        cls,
        service_filter: ClassFilter | None = None,
        provider_filter: ClassFilter | None = None,
    ) -> None:
        cls.registry().reload(service_filter, provider_filter)

    @classmethod
    def append_scanner(cls, name: str, factory: ScannerFactory) -> None:
        cls.registry().append_scanner(name, factory)

    @classmethod
    def set_enforce_assignability(cls, enforce: bool) -> None:
        cls.registry().enforce_assignability = enforce

    @classmethod
    def is_loaded(cls, scanner_name: str | None = None) -> bool:
        return cls.registry().is_loaded(scanner_name)

    @classmethod
    def scanner_names(cls) -> tuple[str, ...]:
        return cls.registry().scanner_names()

    @classmethod
    def has_service(cls, contract: Any) -> bool:
        return cls.registry().has_service(contract)

    @classmethod
    def find_services(cls, service_filter: Callable[[type], bool]) -> set[Service]:
        return cls.registry().find_services(service_filter)

    @classmethod
    def load_service(cls, contract: Any, name: str | None = None) -> Any:
        """Instantiate a provider of ``contract``, loading the registry on first use."""

        registry = cls.registry()
        with cls._lock:
            if not registry.is_loaded() and not registry.services():
                registry.load()
        return registry.load_service_provider(contract, name)

    @classmethod
    def load_all_services(cls, contract: Any) -> list[Any]:
        return cls.registry().load_all_service_providers(contract)
