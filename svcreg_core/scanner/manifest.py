"""Discover providers listed in ``META-INF/services`` manifest files."""

from __future__ import annotations

import logging
import sys
import zipfile
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Iterable, Iterator, Sequence

from svcreg_core.filters import ClassFilter

from .base import MANIFEST_SCANNER, Scanner
from .resolver import TypeResolver

if TYPE_CHECKING:
    from svcreg_core.api.abc import AbstractServiceRegistry

logger = logging.getLogger(__name__)

MANIFEST_DIRECTORY = "META-INF/services"


def parse_manifest(text: str) -> list[str]:
    """Return implementation names from a manifest; ``#`` starts a comment."""

    names: list[str] = []
    for line in text.splitlines():
        name = line.split("#", 1)[0].strip()
        if name:
            names.append(name)
    return names


class ManifestScanner(Scanner):
    """Read one manifest per contract from directories and zip archives.

    Each root (``sys.path`` by default) may hold ``META-INF/services/<contract>``
    files, either on disk or inside a zip archive (zip, wheel, egg) at the
    same relative path. Each non-comment line names an implementation class.
    """

    name = MANIFEST_SCANNER

    def __init__(
        self,
        service_filter: ClassFilter | None = None,
        provider_filter: ClassFilter | None = None,
        enforce_assignability: bool = False,
        *,
        resolver: TypeResolver | None = None,
        roots: Sequence[str | Path] | None = None,
        directory: str = MANIFEST_DIRECTORY,
    ) -> None:
        super().__init__(
            service_filter,
            provider_filter,
            enforce_assignability,
            resolver=resolver,
        )
        self._roots = roots
        self.directory = directory.strip("/")

    def roots(self) -> list[Path]:
        """Roots to search, deduplicated with their order preserved."""

        candidates = sys.path if self._roots is None else self._roots
        seen: set[str] = set()
        ordered: list[Path] = []
        for root in candidates:
            key = str(root) or "."
            if key in seen:
                continue
            seen.add(key)
            ordered.append(Path(key))
        return ordered

    def scan(self, registry: AbstractServiceRegistry) -> bool:
        logger.debug("start scan: %s", self.name)
        for root in self.roots():
            for contract_name, text, origin in self._manifests(root):
                self._register_manifest(registry, contract_name, text, origin)
        logger.debug("scan complete: %s", self.name)
        return True

    def _register_manifest(
        self,
        registry: AbstractServiceRegistry,
        contract_name: str,
        text: str,
        origin: str,
    ) -> None:
        contract = self.resolver(contract_name)
        if contract is None:
            logger.warning("service class definition not found: %s (%s)", contract_name, origin)
            return
        self.register(registry, contract, parse_manifest(text), origin=origin)

    def _manifests(self, root: Path) -> Iterator[tuple[str, str, str]]:
        if root.is_dir():
            yield from self._directory_manifests(root / self.directory)
        elif root.is_file() and zipfile.is_zipfile(root):
            yield from self._archive_manifests(root)

    def _directory_manifests(self, services_dir: Path) -> Iterator[tuple[str, str, str]]:
        if not services_dir.is_dir():
            return
        logger.debug("reading manifests under %s", services_dir)
        for path in sorted(services_dir.rglob("*")):
            if not path.is_file():
                continue
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.error("failed to read service file %s: %s", path, exc)
                continue
            yield path.name, text, str(path)

    def _archive_manifests(self, archive: Path) -> Iterator[tuple[str, str, str]]:
        prefix = f"{self.directory}/"
        try:
            with zipfile.ZipFile(archive) as bundle:
                members = sorted(
                    info.filename
                    for info in bundle.infolist()
                    if info.filename.startswith(prefix) and not info.is_dir()
                )
                if members:
                    logger.debug("reading manifests inside %s", archive)
                entries = list(self._read_members(bundle, archive, members))
        except (OSError, zipfile.BadZipFile) as exc:
            logger.error("failed to open archive %s: %s", archive, exc)
            return
        yield from entries

    @staticmethod
    def _read_members(
        bundle: zipfile.ZipFile,
        archive: Path,
        members: Iterable[str],
    ) -> Iterator[tuple[str, str, str]]:
        for member in members:
            try:
                text = bundle.read(member).decode("utf-8")
            except (OSError, KeyError, UnicodeDecodeError, zipfile.BadZipFile) as exc:
                logger.error("failed to read service file %s!%s: %s", archive, member, exc)
                continue
            yield PurePosixPath(member).name, text, f"{archive}!{member}"
