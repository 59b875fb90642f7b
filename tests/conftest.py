from __future__ import annotations

import pytest

from svcreg_core.registry import ServiceRegistry
from testclasses.scanners import FixtureScanner


@pytest.fixture
def registry() -> ServiceRegistry:
    """Registry loaded only from the fixture scanner."""

    registry = ServiceRegistry(scanners={})
    registry.append_scanner(FixtureScanner.name, FixtureScanner)
    registry.load()
    return registry
