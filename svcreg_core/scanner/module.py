"""Discover providers declared as entry points of installed distributions."""

from __future__ import annotations

import importlib.metadata
import logging
import sys
from typing import TYPE_CHECKING, Any, Callable, Iterable

from svcreg_core.filters import ClassFilter

from .base import MODULE_SCANNER, Scanner
from .resolver import TypeResolver, looks_like_type_name

if TYPE_CHECKING:
    from svcreg_core.api.abc import AbstractServiceRegistry

logger = logging.getLogger(__name__)

DistributionSource = Callable[[], Iterable[Any]]


def _distribution_name(distribution: Any) -> str:
    try:
        return str(distribution.metadata["Name"] or "")
    except (KeyError, TypeError, AttributeError):
        return ""


class ModuleScanner(Scanner):
    """Treat every entry-point group named after a class as a service contract.

    A distribution declares providers in its packaging metadata::

        [project.entry-points."myapp.api.Greeter"]
        formal = "myapp.greeters:FormalGreeter"
        casual = "myapp.greeters:CasualGreeter"

    Only groups whose top-level package is already imported, or that start
    with one of ``group_prefixes``, are resolved, so unrelated dotted groups
    (``sphinx.builders`` and the like) never import third-party code.

    Distributions are visited in name order and each group's entry points in
    declaration order.
    """

    name = MODULE_SCANNER

    def __init__(
        self,
        service_filter: ClassFilter | None = None,
        provider_filter: ClassFilter | None = None,
        enforce_assignability: bool = False,
        *,
        resolver: TypeResolver | None = None,
        distributions: DistributionSource | None = None,
        group_prefixes: Iterable[str] = (),
    ) -> None:
        super().__init__(
            service_filter,
            provider_filter,
            enforce_assignability,
            resolver=resolver,
        )
        self._distributions = distributions or importlib.metadata.distributions
        self.group_prefixes = tuple(group_prefixes)

    def is_candidate(self, group: str) -> bool:
        """Whether ``group`` may name a contract worth importing."""

        if any(group.startswith(prefix) for prefix in self.group_prefixes):
            return True
        return group.replace(":", ".").split(".", 1)[0] in sys.modules

    def scan(self, registry: AbstractServiceRegistry) -> bool:
        logger.debug("start scan: %s", self.name)
        seen: set[str] = set()
        for distribution in sorted(self._distributions(), key=_distribution_name):
            dist_name = _distribution_name(distribution)
            if dist_name in seen:
                continue
            seen.add(dist_name)
            try:
                provides = self._provides(distribution)
            except (ValueError, OSError) as exc:
                logger.warning("skipping distribution %s: unreadable entry points (%s)", dist_name, exc)
                continue
            for group, values in provides.items():
                self._register_group(registry, dist_name, group, values)
        logger.debug("scan complete: %s", self.name)
        return True

    def _provides(self, distribution: Any) -> dict[str, list[str]]:
        provides: dict[str, list[str]] = {}
        for entry_point in distribution.entry_points:
            if not looks_like_type_name(entry_point.group) or not self.is_candidate(entry_point.group):
                continue
            provides.setdefault(entry_point.group, []).append(entry_point.value)
        return provides

    def _register_group(
        self,
        registry: AbstractServiceRegistry,
        dist_name: str,
        group: str,
        values: list[str],
    ) -> None:
        contract = self.resolver(group)
        if contract is None:
            logger.debug("entry point group %s of %s is not a class", group, dist_name)
            return
        logger.debug("scanning %s providers declared by %s", group, dist_name)
        self.register(registry, contract, values, origin=f"distribution {dist_name}")
