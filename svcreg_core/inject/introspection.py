"""Describe the constructors and injected fields a class offers."""

from __future__ import annotations

import inspect
import logging
import sys
import typing
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Mapping

from svcreg_core.api.decorators import InjectedField, is_constructor, is_dependency_injection
from svcreg_core.api.types import Named
from svcreg_core.errors import ProviderConstructionError

logger = logging.getLogger(__name__)

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True)
class ParameterSpec:
    """One constructor parameter; ``annotation`` is None when it has no usable type."""

    name: str
    annotation: Any
    provider_name: str | None
    kind: Any
    has_default: bool


@dataclass(frozen=True)
class ConstructorSpec:
    """``__init__`` or an ``@constructor`` classmethod of ``owner``."""

    owner: type
    attribute: str
    parameters: tuple[ParameterSpec, ...]
    marked: bool

    def describe(self) -> str:
        names = ", ".join(parameter.name for parameter in self.parameters)
        return f"{self.owner.__qualname__}.{self.attribute}({names})"

    def invoke(self, values: Mapping[str, Any]) -> Any:
        """Call the constructor with ``values``; omitted parameters keep their defaults."""

        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        gap = False
        for parameter in self.parameters:
            if parameter.name not in values:
                gap = True
                continue
            value = values[parameter.name]
            if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
                if gap:
                    raise ProviderConstructionError(
                        self.owner,
                        f"{self.describe()}: positional-only parameter {parameter.name} follows an omitted one",
                    )
                args.append(value)
            else:
                kwargs[parameter.name] = value
        factory = self.owner if self.attribute == "__init__" else getattr(self.owner, self.attribute)
        return factory(*args, **kwargs)


@dataclass(frozen=True)
class FieldSpec:
    """A class attribute declared with ``inject()``."""

    name: str
    annotation: Any
    provider_name: str | None


def unwrap_annotation(hint: Any) -> tuple[Any, str | None]:
    """Split ``Annotated[T, Named(...)]`` into ``(T, name)``; plain hints pass through."""

    if hint is None or hint is inspect.Parameter.empty or isinstance(hint, str):
        return None, None
    if typing.get_origin(hint) is Annotated:
        base, *extras = typing.get_args(hint)
        named = next((extra for extra in extras if isinstance(extra, Named)), None)
        return base, named.provider_name if named is not None else None
    return hint, None


_HINT_ERRORS = (NameError, TypeError, AttributeError, SyntaxError)


def _evaluate(
    annotations: Mapping[str, Any],
    globalns: Mapping[str, Any],
    localns: Mapping[str, Any],
    target: Any,
) -> dict[str, Any]:
    hints: dict[str, Any] = {}
    for name, value in annotations.items():
        if isinstance(value, str):
            try:
                value = eval(value, dict(globalns), dict(localns))
            except _HINT_ERRORS as exc:
                logger.debug("cannot resolve hint %s of %r: %s", name, target, exc)
                continue
        hints[name] = value
    return hints


def _hints_one_by_one(target: Any, owner: type) -> dict[str, Any]:
    if not isinstance(target, type):
        func = inspect.unwrap(target)
        return _evaluate(
            inspect.get_annotations(func),
            getattr(func, "__globals__", {}),
            {owner.__name__: owner},
            target,
        )

    hints: dict[str, Any] = {}
    # base classes first so subclasses override
    for klass in reversed(target.__mro__):
        module = sys.modules.get(klass.__module__)
        hints.update(
            _evaluate(
                inspect.get_annotations(klass),
                vars(module) if module is not None else {},
                {**vars(klass), owner.__name__: owner},
                klass,
            )
        )
    return hints


def _type_hints(target: Any, owner: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(
            target,
            localns={owner.__name__: owner},
            include_extras=True,
        )
    except _HINT_ERRORS as exc:
        # keep whatever still resolves, e.g. around TYPE_CHECKING-only imports
        logger.debug("resolving type hints of %r one by one: %s", target, exc)
    return _hints_one_by_one(target, owner)


def _describe(owner: type, attribute: str, func: Callable[..., Any], marked: bool) -> ConstructorSpec:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError) as exc:
        logger.debug("no signature for %s.%s: %s", owner.__qualname__, attribute, exc)
        return ConstructorSpec(owner=owner, attribute=attribute, parameters=(), marked=marked)

    hints = _type_hints(func, owner)
    parameters: list[ParameterSpec] = []
    # drop self / cls
    for parameter in list(signature.parameters.values())[1:]:
        if parameter.kind in _SKIPPED_KINDS:
            continue
        annotation, provider_name = unwrap_annotation(
            hints.get(parameter.name, parameter.annotation)
        )
        parameters.append(
            ParameterSpec(
                name=parameter.name,
                annotation=annotation,
                provider_name=provider_name,
                kind=parameter.kind,
                has_default=parameter.default is not inspect.Parameter.empty,
            )
        )
    return ConstructorSpec(
        owner=owner,
        attribute=attribute,
        parameters=tuple(parameters),
        marked=marked,
    )


def constructors_of(cls: type) -> tuple[ConstructorSpec, ...]:
    """Return ``__init__`` followed by ``@constructor`` classmethods in definition order.

    Classmethods are collected along the MRO, subclass first; a name
    redefined by a subclass hides the inherited definition.
    """

    init = cls.__init__
    if init is object.__init__:
        specs = [ConstructorSpec(owner=cls, attribute="__init__", parameters=(), marked=False)]
    else:
        specs = [_describe(cls, "__init__", init, is_dependency_injection(init))]

    seen: set[str] = {"__init__"}
    for klass in cls.__mro__:
        for attribute, value in vars(klass).items():
            if attribute in seen:
                continue
            seen.add(attribute)
            if is_constructor(value):
                specs.append(
                    _describe(cls, attribute, value.__func__, is_dependency_injection(value))
                )
    return tuple(specs)


def fields_of(cls: type) -> tuple[FieldSpec, ...]:
    """Return the ``inject()`` fields of ``cls`` and its bases."""

    hints = _type_hints(cls, cls)
    fields: list[FieldSpec] = []
    seen: set[str] = set()
    for klass in cls.__mro__:
        for attribute, value in vars(klass).items():
            if attribute in seen:
                continue
            seen.add(attribute)
            if not isinstance(value, InjectedField):
                continue
            declared = value.service_type if value.service_type is not None else hints.get(attribute)
            annotation, named = unwrap_annotation(declared)
            fields.append(
                FieldSpec(
                    name=attribute,
                    annotation=annotation,
                    provider_name=value.provider_name or named,
                )
            )
    return tuple(fields)
