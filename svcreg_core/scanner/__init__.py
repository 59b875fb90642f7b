"""Discovery strategies that populate a service registry."""

from .base import MANIFEST_SCANNER, MODULE_SCANNER, Scanner, ScannerFactory
from .manifest import MANIFEST_DIRECTORY, ManifestScanner, parse_manifest
from .module import ModuleScanner
from .resolver import TypeResolver, import_type, looks_like_type_name

__all__ = [
    "MANIFEST_DIRECTORY",
    "MANIFEST_SCANNER",
    "MODULE_SCANNER",
    "ManifestScanner",
    "ModuleScanner",
    "Scanner",
    "ScannerFactory",
    "TypeResolver",
    "import_type",
    "looks_like_type_name",
    "parse_manifest",
]
