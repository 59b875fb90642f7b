"""Service registry with provider discovery and constructor/field injection."""

from .api import (
    AbstractServiceRegistry,
    Named,
    ServiceLifetime,
    constructor,
    dependency_injection,
    inject,
    service_provider,
)
from .bootstrap import BootstrapOptions, bootstrap
from .config import RegistryConfig, load_config
from .errors import (
    ArgumentTypeMismatchError,
    AssignabilityViolationError,
    ConfigError,
    MissingArgumentError,
    NoViableConstructorError,
    ProviderConstructionError,
    ProviderNotFoundError,
    RegistryError,
    ScanError,
    ScannerNotFoundError,
    ServiceNotFoundError,
)
from .events import Event, EventBus
from .filters import ClassFilter, ClassFilters
from .inject import Injector
from .provider import Provider
from .registry import ServiceRegistry
from .scanner import ManifestScanner, ModuleScanner, Scanner
from .service import Service

__version__ = "0.1.0"

__all__ = [
    "AbstractServiceRegistry",
    "ArgumentTypeMismatchError",
    "AssignabilityViolationError",
    "BootstrapOptions",
    "ClassFilter",
    "ClassFilters",
    "ConfigError",
    "Event",
    "EventBus",
    "Injector",
    "ManifestScanner",
    "MissingArgumentError",
    "ModuleScanner",
    "Named",
    "NoViableConstructorError",
    "Provider",
    "ProviderConstructionError",
    "ProviderNotFoundError",
    "RegistryConfig",
    "RegistryError",
    "ScanError",
    "Scanner",
    "ScannerNotFoundError",
    "Service",
    "ServiceLifetime",
    "ServiceNotFoundError",
    "ServiceRegistry",
    "bootstrap",
    "constructor",
    "dependency_injection",
    "inject",
    "load_config",
    "service_provider",
]
