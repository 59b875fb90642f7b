"""Convenience imports for provider markers and registry interfaces."""

from .abc import AbstractServiceRegistry
from .decorators import (
    InjectedField,
    constructor,
    dependency_injection,
    inject,
    provider_metadata,
    service_provider,
)
from .types import Named, ProviderMetadata, ServiceLifetime

__all__ = [
    "AbstractServiceRegistry",
    "InjectedField",
    "Named",
    "ProviderMetadata",
    "ServiceLifetime",
    "constructor",
    "dependency_injection",
    "inject",
    "provider_metadata",
    "service_provider",
]
