"""A service contract and the providers that can fulfill it."""

from __future__ import annotations

import logging
import threading
import weakref
from typing import TYPE_CHECKING

from svcreg_core.errors import RegistryError, type_name
from svcreg_core.provider import Provider

if TYPE_CHECKING:
    from svcreg_core.api.abc import AbstractServiceRegistry

logger = logging.getLogger(__name__)


class Service:
    """One contract type plus its providers, unique by concrete type.

    Equality and hashing use the contract only, so registries can
    deduplicate services discovered by different scanners.
    """

    def __init__(
        self,
        contract: type,
        registry: AbstractServiceRegistry,
        enforce_assignability: bool | None = None,
    ) -> None:
        if not isinstance(contract, type):
            raise TypeError(f"service contract must be a class, got {contract!r}")
        self._contract = contract
        self._registry_ref = weakref.ref(registry)
        self.enforce_assignability = (
            registry.enforce_assignability
            if enforce_assignability is None
            else bool(enforce_assignability)
        )
        self._providers: dict[type, Provider] = {}
        self._lock = threading.Lock()

    @property
    def contract(self) -> type:
        return self._contract

    @property
    def registry(self) -> AbstractServiceRegistry:
        registry = self._registry_ref()
        if registry is None:
            raise RegistryError(f"registry for service {type_name(self._contract)} is gone")
        return registry

    def new_provider(self, concrete_type: type) -> Provider:
        """Build a provider with the owning registry's provider class."""

        provider_class = getattr(self.registry, "provider_class", None) or Provider
        return provider_class(self, concrete_type)

    def append_provider(self, provider: Provider) -> bool:
        """Add ``provider``; return False when its concrete type is already present."""

        with self._lock:
            if provider.concrete_type in self._providers:
                return False
            self._providers[provider.concrete_type] = provider
        logger.debug("provider %s appended to %s", provider.name, self)
        return True

    def providers(self) -> tuple[Provider, ...]:
        """Providers in discovery order."""

        with self._lock:
            return tuple(self._providers.values())

    def has_provider(self, concrete_type: type) -> bool:
        with self._lock:
            return concrete_type in self._providers

    def get_provider(self, name: str | None = None) -> Provider | None:
        """Return the named provider, or the preferred one when ``name`` is omitted.

        Providers declared with ``@service_provider`` are preferred over
        unmarked ones and the highest priority wins; ties go to the provider
        discovered first. Without marked providers the first discovered
        provider is returned.
        """

        providers = self.providers()
        if name is not None:
            return next((provider for provider in providers if provider.name == name), None)
        marked = [provider for provider in providers if provider.metadata is not None]
        if marked:
            # max() keeps the first of equal keys
            return max(marked, key=lambda provider: provider.priority)
        return providers[0] if providers else None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Service):
            return NotImplemented
        return self._contract is other._contract

    def __hash__(self) -> int:
        return hash(self._contract)

    def __repr__(self) -> str:
        return f"Service(contract={type_name(self._contract)})"
