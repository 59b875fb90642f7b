"""A concrete implementation bound to a service, with its lifetime."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from svcreg_core.api.decorators import provider_metadata
from svcreg_core.api.types import ProviderMetadata, ServiceLifetime
from svcreg_core.errors import AssignabilityViolationError, type_name
from svcreg_core.filters import is_assignable

if TYPE_CHECKING:
    from svcreg_core.service import Service

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class Provider:
    """Produces instances of ``concrete_type`` for its owning service.

    Singleton providers cache the first instance they build. The cache is
    guarded by a re-entrant per-provider lock: concurrent first calls create
    exactly one instance, and a field dependency that loops back to this
    provider on the same thread receives the cached, already-constructed
    object.
    """

    def __init__(self, service: Service, concrete_type: type) -> None:
        if not isinstance(concrete_type, type):
            raise TypeError(f"provider must be a class, got {concrete_type!r}")
        if service.enforce_assignability and not is_assignable(concrete_type, service.contract):
            logger.error(
                "provider %s does not implement service %s",
                type_name(concrete_type),
                type_name(service.contract),
            )
            raise AssignabilityViolationError(concrete_type, service.contract)

        self._service = service
        self._concrete_type = concrete_type
        self._metadata = provider_metadata(concrete_type)
        if self._metadata is not None:
            self._name = self._metadata.name or type_name(concrete_type)
            self._lifetime = self._metadata.lifetime
        else:
            self._name = type_name(concrete_type)
            self._lifetime = ServiceLifetime.TRANSIENT
        self._instance: Any = _UNSET
        self._ready = False
        self._lock = threading.RLock()

    @property
    def service(self) -> Service:
        return self._service

    @property
    def concrete_type(self) -> type:
        return self._concrete_type

    @property
    def name(self) -> str:
        return self._name

    @property
    def lifetime(self) -> ServiceLifetime:
        return self._lifetime

    @property
    def metadata(self) -> ProviderMetadata | None:
        return self._metadata

    @property
    def priority(self) -> int:
        return self._metadata.priority if self._metadata is not None else 0

    @property
    def is_singleton(self) -> bool:
        return self._lifetime is ServiceLifetime.SINGLETON

    def get_instance(self) -> Any:
        """Return an instance, building (and for singletons caching) it as needed."""

        if self._ready:
            logger.debug("returning cached singleton for %s", self._name)
            return self._instance
        if not self.is_singleton:
            return self._create()
        with self._lock:
            if self._instance is not _UNSET:
                return self._instance
            return self._create()

    def _create(self) -> Any:
        injector = self._service.registry.injector
        instance = injector.construct(self._concrete_type)
        if self.is_singleton:
            logger.debug("caching singleton instance of %s", self._name)
            self._instance = instance
        try:
            injector.inject_fields(instance)
        except BaseException:
            if self.is_singleton:
                self._instance = _UNSET
            raise
        if self.is_singleton:
            self._ready = True
        return instance

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Provider):
            return NotImplemented
        return (
            self._service == other._service
            and self._concrete_type is other._concrete_type
            and self._name == other._name
        )

    def __hash__(self) -> int:
        return hash((self._service, self._concrete_type, self._name))

    def __repr__(self) -> str:
        return (
            f"Provider(service={type_name(self._service.contract)}, "
            f"provider={type_name(self._concrete_type)}, name={self._name!r}, "
            f"lifetime={self._lifetime.value})"
        )
