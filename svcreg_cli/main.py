"""Inspect the services and scanners a registry discovers."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from typing import Any, Sequence

from svcreg_core import __version__
from svcreg_core.bootstrap import BootstrapOptions, bootstrap
from svcreg_core.config import RegistryConfig, load_config
from svcreg_core.errors import ConfigError, RegistryError, type_name
from svcreg_core.filters import ClassFilters
from svcreg_core.registry import ServiceRegistry
from svcreg_core.scanner import import_type
from svcreg_core.service import Service

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svcreg",
        description="Discover service providers and show how they resolve.",
    )
    parser.add_argument("--version", action="version", version=f"svcreg v{__version__}")
    parser.add_argument("--config", help="registry configuration file (.toml or .yml)")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = False

    services_cmd = subparsers.add_parser("services", help="load the registry and list services")
    _add_load_arguments(services_cmd)
    services_cmd.add_argument("--json", action="store_true", help="print JSON instead of text")
    services_cmd.set_defaults(func=_handle_services)

    scanners_cmd = subparsers.add_parser("scanners", help="list registered scanner names")
    scanners_cmd.set_defaults(func=_handle_scanners)

    show_cmd = subparsers.add_parser("show", help="show the providers of one contract")
    show_cmd.add_argument("contract", help="qualified contract class (pkg.mod.Class)")
    _add_load_arguments(show_cmd)
    show_cmd.set_defaults(func=_handle_show)

    return parser


def _add_load_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--scanner", help="run only this scanner")
    parser.add_argument(
        "--service-module",
        action="append",
        default=[],
        dest="service_modules",
        help="only admit contracts from this module prefix (repeatable)",
    )
    parser.add_argument(
        "--provider-module",
        action="append",
        default=[],
        dest="provider_modules",
        help="only admit providers from this module prefix (repeatable)",
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(f"[svcreg] error: {exc}")
        return 2
    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    try:
        return func(args, config)
    except (ConfigError, RegistryError) as exc:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"[svcreg] error: {exc}")
        return 1


def _options(config: RegistryConfig, args: argparse.Namespace) -> BootstrapOptions:
    options = BootstrapOptions.from_config(config)
    if getattr(args, "service_modules", None):
        options = options.with_service_filter(ClassFilters.in_module(*args.service_modules))
    if getattr(args, "provider_modules", None):
        options = options.with_provider_filter(ClassFilters.in_module(*args.provider_modules))
    return options


def _loaded_registry(config: RegistryConfig, args: argparse.Namespace) -> ServiceRegistry:
    options = _options(config, args)
    registry = bootstrap(replace(options, load_registry=False))
    if args.scanner:
        registry.load_scanner(args.scanner, options.service_filter, options.provider_filter)
    else:
        registry.load(options.service_filter, options.provider_filter)
    return registry


def _describe_service(service: Service) -> dict[str, Any]:
    selected = service.get_provider()
    return {
        "contract": type_name(service.contract),
        "providers": [
            {
                "name": provider.name,
                "class": type_name(provider.concrete_type),
                "lifetime": provider.lifetime.value,
                "priority": provider.priority,
                "default": provider is selected,
            }
            for provider in service.providers()
        ],
    }


def _handle_services(args: argparse.Namespace, config: RegistryConfig) -> int:
    registry = _loaded_registry(config, args)
    described = sorted(
        (_describe_service(service) for service in registry.services()),
        key=lambda item: item["contract"],
    )
    if args.json:
        print(json.dumps(described, indent=2))
        return 0
    if not described:
        print("[svcreg] no services found")
        return 0
    for item in described:
        print(item["contract"])
        for provider in item["providers"]:
            marker = "*" if provider["default"] else " "
            print(f"  {marker} {provider['name']} ({provider['lifetime']}, priority={provider['priority']})")
    return 0


def _handle_scanners(_: argparse.Namespace, config: RegistryConfig) -> int:
    registry = bootstrap(replace(BootstrapOptions.from_config(config), load_registry=False))
    for name in registry.scanner_names():
        print(name)
    return 0


def _handle_show(args: argparse.Namespace, config: RegistryConfig) -> int:
    contract = import_type(args.contract)
    if contract is None:
        print(f"[svcreg] unknown contract: {args.contract}")
        return 1
    registry = _loaded_registry(config, args)
    service = registry.find_service(contract)
    if service is None:
        print(f"[svcreg] no service registered for {type_name(contract)}")
        return 1
    item = _describe_service(service)
    print(f"contract: {item['contract']}")
    for provider in item["providers"]:
        marker = "*" if provider["default"] else " "
        print(
            f"  {marker} {provider['name']} class={provider['class']} "
            f"lifetime={provider['lifetime']} priority={provider['priority']}"
        )
    return 0
