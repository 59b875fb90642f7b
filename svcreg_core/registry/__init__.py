"""Convenience exports for the service registry."""

from .registry import BUILTIN_SCANNERS, ServiceRegistry

__all__ = [
    "BUILTIN_SCANNERS",
    "ServiceRegistry",
]
