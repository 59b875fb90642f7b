"""Discovery strategies that populate a service registry."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Iterable

from svcreg_core.errors import ProviderConstructionError, type_name
from svcreg_core.filters import ClassFilter, ClassFilters

from .resolver import TypeResolver, import_type

if TYPE_CHECKING:
    from svcreg_core.api.abc import AbstractServiceRegistry
    from svcreg_core.service import Service

logger = logging.getLogger(__name__)

MODULE_SCANNER = "module"
MANIFEST_SCANNER = "manifest"

ScannerFactory = Callable[[ClassFilter, ClassFilter, bool], "Scanner"]


class Scanner(ABC):
    """Finds contract/implementation pairs in one data source.

    Subclasses only implement :meth:`scan`; they append whatever they find
    directly into the registry passed in and keep no discovered state.
    """

    name: str = "scanner"

    def __init__(
        self,
        service_filter: ClassFilter | None = None,
        provider_filter: ClassFilter | None = None,
        enforce_assignability: bool = False,
        *,
        resolver: TypeResolver | None = None,
    ) -> None:
        self.service_filter = service_filter or ClassFilters.DEFAULT
        self.provider_filter = provider_filter or ClassFilters.DEFAULT
        self.enforce_assignability = enforce_assignability
        self.resolver = resolver or import_type

    @abstractmethod
    def scan(self, registry: AbstractServiceRegistry) -> bool:
        """Populate ``registry``; return True unless discovery failed structurally."""

    def register(
        self,
        registry: AbstractServiceRegistry,
        contract: type,
        provider_names: Iterable[str],
        *,
        origin: str,
    ) -> Service | None:
        """Resolve the implementations of ``contract`` and register them.

        Unresolvable names and rejected providers are logged and skipped. The
        service is appended to the registry only when it has providers.
        """

        if not self.service_filter(contract):
            logger.debug("service %s rejected by filter", type_name(contract))
            return None

        service = registry.find_service(contract) or registry.new_service(
            contract, self.enforce_assignability
        )
        for provider_name in provider_names:
            concrete = self.resolver(provider_name)
            if concrete is None:
                logger.warning(
                    "provider class not found for service %s: %s (%s)",
                    type_name(contract),
                    provider_name,
                    origin,
                )
                continue
            self.append_provider(service, concrete)

        if service.providers():
            registry.append_service(service)
            return service
        return None

    def append_provider(self, service: Service, concrete: type) -> bool:
        if not self.provider_filter(concrete):
            logger.debug("provider %s rejected by filter", type_name(concrete))
            return False
        if service.has_provider(concrete):
            return False
        try:
            provider = service.new_provider(concrete)
        except ProviderConstructionError as exc:
            logger.error("skipping provider %s: %s", type_name(concrete), exc)
            return False
        return service.append_provider(provider)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(service_filter={self.service_filter!r}, "
            f"provider_filter={self.provider_filter!r}, "
            f"enforce_assignability={self.enforce_assignability})"
        )
