"""Decorators and markers that describe how classes are provided and injected."""

from __future__ import annotations

from typing import Any, Callable, TypeVar, overload

from .types import (
    CONSTRUCTOR_ATTR,
    DEPENDENCY_INJECTION_ATTR,
    SERVICE_PROVIDER_ATTR,
    ProviderMetadata,
    ServiceLifetime,
)

_T = TypeVar("_T", bound=type)
_F = TypeVar("_F")


def _attach_provider_metadata(cls: type, metadata: ProviderMetadata) -> type:
    if not isinstance(cls, type):
        raise TypeError("Decorated object must be a class.")
    setattr(cls, SERVICE_PROVIDER_ATTR, metadata)
    return cls


@overload
def service_provider(cls: _T) -> _T: ...


@overload
def service_provider(
    cls: None = None,
    *,
    name: str = "",
    lifetime: ServiceLifetime = ServiceLifetime.TRANSIENT,
    priority: int = 1,
) -> Callable[[_T], _T]: ...


def service_provider(
    cls: Any = None,
    *,
    name: str = "",
    lifetime: ServiceLifetime = ServiceLifetime.TRANSIENT,
    priority: int = 1,
) -> Any:
    """Mark a class as an explicit provider with a name, lifetime and priority.

    Marked providers win over unmarked ones when a service picks its default
    provider; among marked providers the highest ``priority`` wins.
    Usable bare (``@service_provider``) or with arguments.
    """

    metadata = ProviderMetadata(name=name, lifetime=lifetime, priority=priority)

    def wrap(target: _T) -> _T:
        return _attach_provider_metadata(target, metadata)

    if cls is None:
        return wrap
    return wrap(cls)


def provider_metadata(cls: type) -> ProviderMetadata | None:
    """Return metadata declared on ``cls`` itself (subclasses do not inherit it)."""

    metadata = vars(cls).get(SERVICE_PROVIDER_ATTR)
    return metadata if isinstance(metadata, ProviderMetadata) else None


def _underlying_function(target: Any) -> Any:
    if isinstance(target, (classmethod, staticmethod)):
        return target.__func__
    return target


def dependency_injection(func: _F) -> _F:
    """Mark ``__init__`` or a ``@constructor`` as the designated injection constructor.

    The marked constructor is also the one used for mixed-mode construction
    with caller-supplied arguments.
    """

    setattr(_underlying_function(func), DEPENDENCY_INJECTION_ATTR, True)
    return func


def constructor(func: Callable[..., Any] | classmethod) -> classmethod:
    """Declare an alternate constructor (a classmethod) the injector may use."""

    method = func if isinstance(func, classmethod) else classmethod(func)
    setattr(method.__func__, CONSTRUCTOR_ATTR, True)
    return method


def is_dependency_injection(func: Any) -> bool:
    return bool(getattr(_underlying_function(func), DEPENDENCY_INJECTION_ATTR, False))


def is_constructor(attr: Any) -> bool:
    return isinstance(attr, classmethod) and bool(
        getattr(attr.__func__, CONSTRUCTOR_ATTR, False)
    )


class InjectedField:
    """Class attribute marker for field injection, created with :func:`inject`."""

    __slots__ = ("service_type", "provider_name", "attribute")

    def __init__(self, service_type: Any = None, provider_name: str | None = None) -> None:
        self.service_type = service_type
        self.provider_name = provider_name or None
        self.attribute: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.attribute = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        raise AttributeError(
            f"{type(instance).__name__}.{self.attribute} has not been injected"
        )

    def __repr__(self) -> str:
        return (
            f"InjectedField(attribute={self.attribute!r}, "
            f"service_type={self.service_type!r}, provider_name={self.provider_name!r})"
        )


def inject(service_type: Any = None, *, provider_name: str | None = None) -> Any:
    """Declare an injected field.

    The service type comes from ``service_type`` or the attribute's class
    annotation::

        class Report:
            formatter: Formatter = inject()
            audit: AuditLog = inject(provider_name="file")
    """

    return InjectedField(service_type, provider_name)
