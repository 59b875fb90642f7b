"""Build a ready-to-use registry from options or configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from .filters import ClassFilter, ClassFilters
from .provider import Provider
from .registry import ServiceRegistry
from .scanner import ScannerFactory
from .service import Service

if TYPE_CHECKING:
    from .config import RegistryConfig

logger = logging.getLogger(__name__)


def _merge_filter(current: ClassFilter | None, added: ClassFilter) -> ClassFilter:
    if added is ClassFilters.DEFAULT:
        return added
    if current is None or current is ClassFilters.DEFAULT:
        return added
    return current | added


@dataclass(frozen=True)
class BootstrapOptions:
    """How to build a registry: its classes, scanners, filters and load policy."""

    registry_class: type[ServiceRegistry] = ServiceRegistry
    service_class: type[Service] = Service
    provider_class: type[Provider] = Provider
    enforce_assignability: bool = False
    scanners: tuple[tuple[str, ScannerFactory], ...] = ()
    service_filter: ClassFilter | None = None
    provider_filter: ClassFilter | None = None
    load_registry: bool = True

    def with_service_filter(self, service_filter: ClassFilter) -> "BootstrapOptions":
        return replace(self, service_filter=_merge_filter(self.service_filter, service_filter))

    def with_provider_filter(self, provider_filter: ClassFilter) -> "BootstrapOptions":
        return replace(self, provider_filter=_merge_filter(self.provider_filter, provider_filter))

    def with_scanner(self, name: str, factory: ScannerFactory) -> "BootstrapOptions":
        return replace(self, scanners=self.scanners + ((name, factory),))

    @classmethod
    def from_config(cls, config: "RegistryConfig") -> "BootstrapOptions":
        return cls(
            enforce_assignability=config.enforce_assignability,
            scanners=tuple(config.scanner_factories().items()),
            service_filter=config.service_filter(),
            provider_filter=config.provider_filter(),
            load_registry=config.load,
        )


def bootstrap(options: BootstrapOptions | None = None) -> ServiceRegistry:
    """Create a registry, append the extra scanners and load it when asked."""

    options = options or BootstrapOptions()
    registry = options.registry_class(
        options.enforce_assignability,
        service_class=options.service_class,
        provider_class=options.provider_class,
    )
    for name, factory in options.scanners:
        registry.append_scanner(name, factory)
    if options.load_registry:
        registry.load(options.service_filter, options.provider_filter)
    logger.debug("bootstrapped %r", registry)
    return registry
