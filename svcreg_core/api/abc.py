"""Abstract base class for service registries."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from svcreg_core.filters import ClassFilter
    from svcreg_core.inject import Injector
    from svcreg_core.service import Service


class AbstractServiceRegistry(ABC):
    """Surface every registry exposes to scanners, providers and the injector.

    Constructor parameters annotated with this type (or a subclass) receive
    the registry that is building the instance.
    """

    @property
    @abstractmethod
    def enforce_assignability(self) -> bool:
        """Default assignability rule for services created by this registry."""

    @property
    @abstractmethod
    def injector(self) -> Injector:
        """Injector that builds instances against this registry."""

    @abstractmethod
    def load(
        self,
        service_filter: ClassFilter | None = None,
        provider_filter: ClassFilter | None = None,
    ) -> None:
        """Run every registered scanner."""

    @abstractmethod
    def reload(
        self,
        service_filter: ClassFilter | None = None,
        provider_filter: ClassFilter | None = None,
    ) -> None:
        """Clear all services and run every scanner again."""

    @abstractmethod
    def services(self) -> tuple[Service, ...]:
        """Snapshot of registered services in registration order."""

    @abstractmethod
    def new_service(self, contract: type, enforce_assignability: bool | None = None) -> Service:
        """Build a service bound to this registry without registering it."""

    @abstractmethod
    def append_service(self, service: Service) -> None:
        """Register ``service`` unless its contract is already registered."""

    @abstractmethod
    def find_service(self, contract: Any) -> Service | None:
        """Return the service registered for ``contract``."""

    def find_services(self, service_filter: Callable[[type], bool]) -> set[Service]:
        return {service for service in self.services() if service_filter(service.contract)}

    def has_service(self, contract: Any) -> bool:
        return self.find_service(contract) is not None

    @abstractmethod
    def load_service_provider(self, contract: Any, name: str | None = None) -> Any:
        """Instantiate the default (or named) provider of ``contract``."""

    @abstractmethod
    def load_all_service_providers(self, contract: Any) -> list[Any]:
        """Instantiate every provider of ``contract``."""

    @abstractmethod
    def load_class(self, cls: type, *args: Any) -> Any:
        """Instantiate an arbitrary class, injecting its dependencies."""
