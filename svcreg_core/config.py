"""Layered registry configuration read from TOML or YAML files and the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import tomllib
import yaml
from platformdirs import user_config_dir

from .errors import ConfigError
from .filters import ClassFilter, ClassFilters
from .scanner import ScannerFactory, TypeResolver, import_type

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "svcreg"
CONFIG_FILE_NAME = "registry.toml"
CONFIG_SECTION = "registry"
CONFIG_ENV = "SVCREG_CONFIG"
ENFORCE_ENV = "SVCREG_ENFORCE_ASSIGNABILITY"
LOG_LEVEL_ENV = "SVCREG_LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def default_config_path() -> Path:
    """Return the platform-specific default path of the registry config file."""

    base_dir = Path(user_config_dir(DEFAULT_APP_NAME, appauthor=False))
    return base_dir / CONFIG_FILE_NAME


def _ensure_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if isinstance(data, Mapping):
        return data
    raise ConfigError(f"expected a mapping for {what}, got {type(data).__name__}")


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def _as_str_list(value: Any, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        return tuple(value)
    raise ConfigError(f"{key} must be a list of strings, got {value!r}")


def _as_log_level(value: Any) -> str:
    level = str(value).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"unknown log_level {value!r}")
    return level


@dataclass(frozen=True)
class RegistryConfig:
    """Settings that shape how a registry is bootstrapped."""

    enforce_assignability: bool = False
    load: bool = True
    log_level: str = "WARNING"
    service_modules: tuple[str, ...] = ()
    provider_modules: tuple[str, ...] = ()
    scanners: dict[str, str] = field(default_factory=dict)
    source: Path | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: Path | None = None) -> "RegistryConfig":
        raw = _ensure_mapping(data, "registry configuration")
        scanners_raw = _ensure_mapping(raw.get("scanners") or {}, "registry.scanners")
        scanners: dict[str, str] = {}
        for name, path in scanners_raw.items():
            if not isinstance(path, str):
                raise ConfigError(f"scanner {name!r} must map to a 'module:Class' string")
            scanners[str(name)] = path
        return cls(
            enforce_assignability=_as_bool(
                raw.get("enforce_assignability", False), "enforce_assignability"
            ),
            load=_as_bool(raw.get("load", True), "load"),
            log_level=_as_log_level(raw.get("log_level", "WARNING")),
            service_modules=_as_str_list(raw.get("service_modules"), "service_modules"),
            provider_modules=_as_str_list(raw.get("provider_modules"), "provider_modules"),
            scanners=scanners,
            source=source,
        )

    def service_filter(self) -> ClassFilter:
        if not self.service_modules:
            return ClassFilters.DEFAULT
        return ClassFilters.in_module(*self.service_modules)

    def provider_filter(self) -> ClassFilter:
        if not self.provider_modules:
            return ClassFilters.DEFAULT
        return ClassFilters.in_module(*self.provider_modules)

    def scanner_factories(self, resolver: TypeResolver | None = None) -> dict[str, ScannerFactory]:
        """Import each configured scanner class; unresolvable paths are errors."""

        resolve = resolver or import_type
        factories: dict[str, ScannerFactory] = {}
        for name, path in self.scanners.items():
            factory = resolve(path)
            if factory is None:
                raise ConfigError(f"scanner {name!r}: cannot import {path!r}")
            factories[name] = factory
        return factories


def _read_document(path: Path) -> Any:
    try:
        if path.suffix in (".yml", ".yaml"):
            return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"malformed configuration {path}: {exc}") from exc


def resolve_config_path(path: Path | str | None = None, env: Mapping[str, str] | None = None) -> Path:
    """Explicit path first, then ``$SVCREG_CONFIG``, then the user config dir."""

    env = os.environ if env is None else env
    if path:
        return Path(path).expanduser()
    if value := env.get(CONFIG_ENV):
        return Path(value).expanduser()
    return default_config_path()


def load_config(path: Path | str | None = None, env: Mapping[str, str] | None = None) -> RegistryConfig:
    """Read the registry configuration, apply env overrides and return it.

    A missing file yields the defaults. Settings live under a ``registry``
    table (TOML) or mapping (YAML).
    """

    env = os.environ if env is None else env
    config_path = resolve_config_path(path, env)
    data: dict[str, Any] = {}
    source: Path | None = None
    if config_path.is_file():
        document = _ensure_mapping(_read_document(config_path), str(config_path))
        data.update(_ensure_mapping(document.get(CONFIG_SECTION) or {}, CONFIG_SECTION))
        source = config_path
        logger.debug("loaded registry configuration from %s", config_path)
    else:
        logger.debug("no registry configuration at %s; using defaults", config_path)

    if (value := env.get(ENFORCE_ENV)) is not None:
        data["enforce_assignability"] = value
    if value := env.get(LOG_LEVEL_ENV):
        data["log_level"] = value
    return RegistryConfig.from_dict(data, source=source)
