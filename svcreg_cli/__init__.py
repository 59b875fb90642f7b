"""Command line entry points for inspecting a service registry."""

from .main import main

__all__ = ["main"]
