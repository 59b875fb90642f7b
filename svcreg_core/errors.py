"""Errors raised by the service registry, its scanners and the injector."""

from __future__ import annotations

from typing import Any


def type_name(value: Any) -> str:
    """Return ``module.QualName`` for classes and ``repr`` for anything else."""

    if isinstance(value, type):
        return f"{value.__module__}.{value.__qualname__}"
    return repr(value)


class RegistryError(Exception):
    """Base class for service registry errors."""


class ServiceNotFoundError(RegistryError):
    """Raised when no service is registered for a contract."""

    def __init__(self, contract: Any) -> None:
        super().__init__(f"no service registered for {type_name(contract)}")
        self.contract = contract


class ProviderNotFoundError(RegistryError):
    """Raised when a service has no provider (or none with the requested name)."""

    def __init__(self, contract: Any, provider_name: str | None = None) -> None:
        if provider_name is None:
            message = f"service {type_name(contract)} has no providers"
        else:
            message = f"provider {provider_name!r} not found for service {type_name(contract)}"
        super().__init__(message)
        self.contract = contract
        self.provider_name = provider_name


class ScannerNotFoundError(RegistryError):
    """Raised when a scanner name is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"no scanner registered with name {name!r}")
        self.name = name


class ProviderConstructionError(RegistryError):
    """Raised when a concrete type cannot be instantiated."""

    def __init__(self, concrete_type: Any, reason: str) -> None:
        super().__init__(f"cannot construct {type_name(concrete_type)}: {reason}")
        self.concrete_type = concrete_type
        self.reason = reason


class NoViableConstructorError(ProviderConstructionError):
    """Raised when none of a type's constructors can be satisfied."""

    def __init__(self, concrete_type: Any, reason: str = "no viable constructor found") -> None:
        super().__init__(concrete_type, reason)


class AssignabilityViolationError(ProviderConstructionError):
    """Raised when a provider does not implement its service contract."""

    def __init__(self, concrete_type: Any, contract: Any) -> None:
        super().__init__(
            concrete_type,
            f"expected a subclass of service {type_name(contract)}",
        )
        self.contract = contract


class MissingArgumentError(RegistryError):
    """Raised when mixed-mode construction runs out of caller arguments."""

    def __init__(self, target: Any, param_name: str, param_type: Any) -> None:
        super().__init__(
            f"no argument value provided for {param_name} "
            f"(type: {type_name(param_type)}) constructing {type_name(target)}"
        )
        self.target = target
        self.param_name = param_name
        self.param_type = param_type


class ArgumentTypeMismatchError(RegistryError):
    """Raised when a caller argument does not match the parameter annotation."""

    def __init__(self, target: Any, param_name: str, expected: Any, value: Any) -> None:
        super().__init__(
            f"argument for {param_name} constructing {type_name(target)} must be "
            f"{type_name(expected)}, got {type(value).__name__} ({value!r})"
        )
        self.target = target
        self.param_name = param_name
        self.expected = expected
        self.value = value


class ScanError(RegistryError):
    """Raised by a scanner when discovery cannot proceed at all."""

    def __init__(self, scanner_name: str, reason: str) -> None:
        super().__init__(f"scanner {scanner_name!r} failed: {reason}")
        self.scanner_name = scanner_name
        self.reason = reason


class ConfigError(RegistryError):
    """Raised when registry configuration cannot be loaded or validated."""
