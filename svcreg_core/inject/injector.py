"""Constructor selection plus constructor and field dependency resolution."""

from __future__ import annotations

import logging
import types
import typing
from collections import deque
from typing import TYPE_CHECKING, Any, TypeVar

from svcreg_core.api.abc import AbstractServiceRegistry
from svcreg_core.errors import (
    ArgumentTypeMismatchError,
    MissingArgumentError,
    NoViableConstructorError,
    ProviderConstructionError,
    RegistryError,
    type_name,
)
from svcreg_core.filters import is_assignable

from .introspection import ConstructorSpec, constructors_of, fields_of

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


def _matches(value: Any, annotation: Any) -> bool:
    """Best-effort ``isinstance`` against a type hint; unknowable hints accept anything."""

    if annotation is None or annotation is Any:
        return True
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        return any(_matches(value, argument) for argument in typing.get_args(annotation))
    target = origin or annotation
    if not isinstance(target, type):
        return True
    try:
        return isinstance(value, target)
    except TypeError:
        return True


class Injector:
    """Builds instances whose dependencies come from a service registry.

    Stateless apart from the registry reference: caching belongs to providers.
    """

    def __init__(self, registry: AbstractServiceRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> AbstractServiceRegistry:
        return self._registry

    def is_injectable(self, annotation: Any) -> bool:
        """True for registry types and for types registered as services."""

        if not isinstance(annotation, type):
            return False
        return is_assignable(annotation, AbstractServiceRegistry) or self._registry.has_service(
            annotation
        )

    def is_viable(self, constructor: ConstructorSpec) -> bool:
        return all(
            parameter.has_default or self.is_injectable(parameter.annotation)
            for parameter in constructor.parameters
        )

    def find_constructor(self, cls: type) -> ConstructorSpec:
        """Pick the constructor used to build ``cls``.

        A constructor is viable when every parameter without a default is
        injectable. The single viable constructor marked with
        ``@dependency_injection`` wins; otherwise the first viable one
        (``__init__`` first, then ``@constructor`` methods in definition order).
        """

        viable = [spec for spec in constructors_of(cls) if self.is_viable(spec)]
        if not viable:
            raise NoViableConstructorError(
                cls, "no constructor whose parameters are all registered services"
            )
        marked = [spec for spec in viable if spec.marked]
        selected = marked[0] if len(marked) == 1 else viable[0]
        logger.debug("selected constructor %s for %s", selected.describe(), type_name(cls))
        return selected

    def resolve(self, service_type: type, provider_name: str | None = None) -> Any:
        """Resolve one dependency; registry-typed requests get the registry itself."""

        if is_assignable(service_type, AbstractServiceRegistry):
            return self._registry
        if provider_name:
            return self._registry.load_service_provider(service_type, provider_name)
        return self._registry.load_service_provider(service_type)

    def construct(self, cls: type[_T]) -> _T:
        """Select a constructor, resolve its parameters and invoke it (no field pass)."""

        constructor = self.find_constructor(cls)
        values = {
            parameter.name: self.resolve(parameter.annotation, parameter.provider_name)
            for parameter in constructor.parameters
            if self.is_injectable(parameter.annotation)
        }
        return self._invoke(constructor, values)

    def inject_fields(self, instance: _T) -> _T:
        """Assign every ``inject()`` field of ``instance`` from the registry."""

        cls = type(instance)
        for field in fields_of(cls):
            if not isinstance(field.annotation, type):
                raise ProviderConstructionError(
                    cls, f"injected field {field.name} has no resolvable service type"
                )
            logger.debug("injecting field %s.%s", cls.__qualname__, field.name)
            value = self.resolve(field.annotation, field.provider_name)
            # bypass custom __setattr__ and frozen dataclasses
            object.__setattr__(instance, field.name, value)
        return instance

    def create_instance(self, cls: type[_T]) -> _T:
        return self.inject_fields(self.construct(cls))

    def create_instance_with_args(self, cls: type[_T], *args: Any) -> _T:
        """Build ``cls`` through its ``@dependency_injection`` constructor.

        Leading parameters whose types are registered services come from the
        registry; from the first parameter that is not, every parameter is
        bound from ``args`` in order.
        """

        constructor = next((spec for spec in constructors_of(cls) if spec.marked), None)
        if constructor is None:
            raise NoViableConstructorError(
                cls,
                "mixed-argument construction requires a constructor marked "
                "with @dependency_injection",
            )

        remaining = deque(args)
        values: dict[str, Any] = {}
        positional = False
        for parameter in constructor.parameters:
            if not positional and self.is_injectable(parameter.annotation):
                values[parameter.name] = self.resolve(parameter.annotation, parameter.provider_name)
                continue
            positional = True
            if not remaining:
                if parameter.has_default:
                    continue
                raise MissingArgumentError(cls, parameter.name, parameter.annotation)
            value = remaining.popleft()
            if not _matches(value, parameter.annotation):
                raise ArgumentTypeMismatchError(cls, parameter.name, parameter.annotation, value)
            values[parameter.name] = value

        if remaining:
            logger.debug(
                "ignoring %d surplus argument(s) constructing %s", len(remaining), type_name(cls)
            )
        return self.inject_fields(self._invoke(constructor, values))

    def _invoke(self, constructor: ConstructorSpec, values: Mapping[str, Any]) -> Any:
        try:
            instance = constructor.invoke(values)
        except RegistryError:
            raise
        except Exception as exc:
            raise ProviderConstructionError(
                constructor.owner,
                f"{constructor.describe()} raised {type(exc).__name__}: {exc}",
            ) from exc
        logger.debug("created instance of %s", type_name(constructor.owner))
        return instance
