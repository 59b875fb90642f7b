"""Metadata types attached to provider classes and injection points."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

SERVICE_PROVIDER_ATTR = "__service_provider__"
DEPENDENCY_INJECTION_ATTR = "__dependency_injection__"
CONSTRUCTOR_ATTR = "__injection_constructor__"


class ServiceLifetime(Enum):
    """Whether a provider builds a new instance per request or caches one."""

    TRANSIENT = "transient"
    SINGLETON = "singleton"


@dataclass(frozen=True)
class ProviderMetadata:
    """Explicit provider settings declared with ``@service_provider``."""

    name: str = ""
    lifetime: ServiceLifetime = ServiceLifetime.TRANSIENT
    priority: int = 1


@dataclass(frozen=True)
class Named:
    """``Annotated`` marker that requests a specific provider by name.

    Example::

        def __init__(self, greeter: Annotated[Greeter, Named("formal")]) -> None:
            ...
    """

    provider_name: str

    def __post_init__(self) -> None:
        if not self.provider_name:
            raise ValueError("provider_name cannot be empty.")
