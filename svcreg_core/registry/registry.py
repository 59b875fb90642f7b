"""Registry that owns services, their scanners and load/reload orchestration."""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping

from svcreg_core.api.abc import AbstractServiceRegistry
from svcreg_core.errors import (
    ProviderNotFoundError,
    ScanError,
    ScannerNotFoundError,
    ServiceNotFoundError,
    type_name,
)
from svcreg_core.events import (
    CLEARED_EVENT,
    POST_LOAD_EVENT,
    POST_SCAN_EVENT,
    PRE_LOAD_EVENT,
    SERVICE_APPENDED_EVENT,
    EventBus,
)
from svcreg_core.filters import ClassFilter, ClassFilters
from svcreg_core.inject import Injector
from svcreg_core.provider import Provider
from svcreg_core.scanner import (
    MANIFEST_SCANNER,
    MODULE_SCANNER,
    ManifestScanner,
    ModuleScanner,
    Scanner,
    ScannerFactory,
)
from svcreg_core.service import Service

logger = logging.getLogger(__name__)

BUILTIN_SCANNERS: Mapping[str, ScannerFactory] = {
    MODULE_SCANNER: ModuleScanner,
    MANIFEST_SCANNER: ManifestScanner,
}


class ServiceRegistry(AbstractServiceRegistry):
    """Services keyed by contract, plus the named scanners that discover them.

    Structural changes (appending services or scanners, load, reload) and
    reads of the service set share one re-entrant lock. Instances are built
    outside that lock so providers may construct concurrently.
    """

    def __init__(
        self,
        enforce_assignability: bool = False,
        *,
        service_class: type[Service] | None = None,
        provider_class: type[Provider] | None = None,
        scanners: Mapping[str, ScannerFactory] | None = None,
        events: EventBus | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._enforce_assignability = bool(enforce_assignability)
        self.service_class = service_class or Service
        self.provider_class = provider_class or Provider
        self.events = events or EventBus()
        self._services: dict[type, Service] = {}
        self._scanners: dict[str, ScannerFactory] = dict(
            BUILTIN_SCANNERS if scanners is None else scanners
        )
        self._scanner_status: dict[str, bool] = {}
        self._loaded = False
        self._injector = Injector(self)

    # ---------- configuration ----------

    @property
    def enforce_assignability(self) -> bool:
        return self._enforce_assignability

    @enforce_assignability.setter
    def enforce_assignability(self, value: bool) -> None:
        self._enforce_assignability = bool(value)

    @property
    def injector(self) -> Injector:
        return self._injector

    def append_scanner(self, name: str, factory: ScannerFactory) -> None:
        """Register (or replace) the scanner factory run under ``name``."""

        if not name:
            raise ValueError("scanner name cannot be empty.")
        with self._lock:
            logger.debug("appending scanner %s: %r", name, factory)
            self._scanners[name] = factory

    def scanner_names(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._scanners)

    # ---------- loading ----------

    def is_loaded(self, scanner_name: str | None = None) -> bool:
        """Whether the last full load succeeded, or whether one scanner did."""

        with self._lock:
            if scanner_name is None:
                return self._loaded
            return self._scanner_status.get(scanner_name, False)

    def load(
        self,
        service_filter: ClassFilter | None = None,
        provider_filter: ClassFilter | None = None,
    ) -> None:
        """Run every registered scanner; loaded only if all of them succeed."""

        service_filter = service_filter or ClassFilters.DEFAULT
        provider_filter = provider_filter or ClassFilters.DEFAULT
        with self._lock:
            self.events.emit(PRE_LOAD_EVENT, {"scanners": list(self._scanners)})
            for name, factory in list(self._scanners.items()):
                scanner = factory(service_filter, provider_filter, self._enforce_assignability)
                self._scanner_status[name] = self._run(name, scanner)
            self._loaded = all(self._scanner_status.get(name, False) for name in self._scanners)
            logger.debug("registry loaded=%s with %d services", self._loaded, len(self._services))
            self.events.emit(POST_LOAD_EVENT, {"loaded": self._loaded})

    def load_scanner(
        self,
        scanner_name: str,
        service_filter: ClassFilter | None = None,
        provider_filter: ClassFilter | None = None,
        enforce_assignability: bool | None = None,
    ) -> bool:
        """Run only the scanner registered as ``scanner_name``."""

        with self._lock:
            factory = self._scanners.get(scanner_name)
            if factory is None:
                raise ScannerNotFoundError(scanner_name)
            scanner = factory(
                service_filter or ClassFilters.DEFAULT,
                provider_filter or ClassFilters.DEFAULT,
                self._enforce_assignability
                if enforce_assignability is None
                else enforce_assignability,
            )
            success = self._run(scanner_name, scanner)
            self._scanner_status[scanner_name] = success
            return success

    def run_scanner(self, scanner: Scanner) -> bool:
        """Run an already configured scanner instance against this registry."""

        with self._lock:
            success = self._run(scanner.name, scanner)
            self._scanner_status[scanner.name] = success
            return success

    def _run(self, name: str, scanner: Scanner) -> bool:
        logger.debug("running scanner %s: %r", name, scanner)
        try:
            success = bool(scanner.scan(self))
        except ScanError:
            logger.exception("scanner %s failed", name)
            success = False
        self.events.emit(POST_SCAN_EVENT, {"scanner": name, "success": success})
        return success

    def reload(
        self,
        service_filter: ClassFilter | None = None,
        provider_filter: ClassFilter | None = None,
    ) -> None:
        """Drop every service and load again with the given filters."""

        with self._lock:
            logger.debug("reloading services")
            self._loaded = False
            self.clear_services()
            self.load(service_filter, provider_filter)

    def clear_services(self) -> None:
        with self._lock:
            logger.debug("clearing all services")
            self._services.clear()
            self.events.emit(CLEARED_EVENT, {})

    # ---------- services ----------

    def new_service(self, contract: type, enforce_assignability: bool | None = None) -> Service:
        return self.service_class(contract, self, enforce_assignability)

    def append_service(self, service: Service) -> None:
        """Register ``service``; a contract that is already present keeps its service."""

        with self._lock:
            if service.contract in self._services:
                return
            self._services[service.contract] = service
            logger.debug("service added: %s", service)
            self.events.emit(SERVICE_APPENDED_EVENT, {"contract": service.contract})

    def services(self) -> tuple[Service, ...]:
        with self._lock:
            return tuple(self._services.values())

    def find_service(self, contract: Any) -> Service | None:
        with self._lock:
            try:
                return self._services.get(contract)
            except TypeError:
                # unhashable lookups can't match a contract
                return None

    # ---------- instances ----------

    def load_service_provider(self, contract: Any, name: str | None = None) -> Any:
        """Instantiate the preferred provider of ``contract`` (or the one called ``name``)."""

        service = self.find_service(contract)
        if service is None:
            raise ServiceNotFoundError(contract)
        if name is None:
            logger.debug("loading provider for service %s", type_name(contract))
        else:
            logger.debug("loading provider %s for service %s", name, type_name(contract))
        provider = service.get_provider(name)
        if provider is None:
            raise ProviderNotFoundError(contract, name)
        return provider.get_instance()

    def load_all_service_providers(self, contract: Any) -> list[Any]:
        """One instance from every provider of ``contract``, in discovery order."""

        service = self.find_service(contract)
        if service is None:
            raise ServiceNotFoundError(contract)
        return [provider.get_instance() for provider in service.providers()]

    def load_class(self, cls: type, *args: Any) -> Any:
        """Build ``cls`` with injected dependencies; ``args`` selects mixed mode."""

        if args:
            return self._injector.create_instance_with_args(cls, *args)
        return self._injector.create_instance(cls)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(services={len(self._services)}, "
            f"scanners={list(self._scanners)}, loaded={self._loaded})"
        )
