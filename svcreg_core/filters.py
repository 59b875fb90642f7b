"""Composable class predicates used to admit or reject discovered types."""

from __future__ import annotations

from typing import Callable

from svcreg_core.api.types import SERVICE_PROVIDER_ATTR

ClassPredicate = Callable[[type], bool]


class ClassFilter:
    """Immutable predicate over classes, composable with ``|``, ``&`` and ``~``."""

    __slots__ = ("_predicate", "_label")

    def __init__(self, predicate: ClassPredicate, label: str | None = None) -> None:
        if not callable(predicate):
            raise TypeError("predicate must be callable.")
        self._predicate = predicate
        self._label = label or getattr(predicate, "__name__", "predicate")

    def __call__(self, cls: type) -> bool:
        return self.test(cls)

    def test(self, cls: type) -> bool:
        return bool(self._predicate(cls))

    def or_(self, other: ClassPredicate) -> "ClassFilter":
        other_filter = _as_filter(other)
        return ClassFilter(
            lambda cls: self.test(cls) or other_filter.test(cls),
            f"({self._label} | {other_filter._label})",
        )

    def and_(self, other: ClassPredicate) -> "ClassFilter":
        other_filter = _as_filter(other)
        return ClassFilter(
            lambda cls: self.test(cls) and other_filter.test(cls),
            f"({self._label} & {other_filter._label})",
        )

    def negate(self) -> "ClassFilter":
        return ClassFilter(lambda cls: not self.test(cls), f"~{self._label}")

    __or__ = or_
    __and__ = and_
    __invert__ = negate

    def __repr__(self) -> str:
        return f"ClassFilter({self._label})"


def _as_filter(predicate: ClassPredicate) -> ClassFilter:
    if predicate is None:
        raise TypeError("cannot compose a ClassFilter with None.")
    if isinstance(predicate, ClassFilter):
        return predicate
    return ClassFilter(predicate)


def is_assignable(cls: type, parent: type) -> bool:
    try:
        return isinstance(cls, type) and issubclass(cls, parent)
    except TypeError:
        # non-runtime-checkable protocols refuse issubclass()
        return False


class ClassFilters:
    """Stock filters."""

    DEFAULT = ClassFilter(lambda cls: True, "DEFAULT")

    @staticmethod
    def implements_interface(parent: type) -> ClassFilter:
        """Accept ``parent`` and its subclasses (including virtual ABC subclasses)."""

        return ClassFilter(
            lambda cls: is_assignable(cls, parent),
            f"implements({parent.__qualname__})",
        )

    @staticmethod
    def has_annotation(attribute: str) -> ClassFilter:
        """Accept classes that declare ``attribute`` themselves (not inherited)."""

        return ClassFilter(lambda cls: attribute in vars(cls), f"has({attribute})")

    @staticmethod
    def has_service_provider_annotation() -> ClassFilter:
        return ClassFilters.has_annotation(SERVICE_PROVIDER_ATTR)

    @staticmethod
    def in_module(*prefixes: str) -> ClassFilter:
        """Accept classes defined in any of the given modules or their submodules."""

        cleaned = tuple(prefix for prefix in prefixes if prefix)
        if not cleaned:
            raise ValueError("in_module requires at least one module prefix.")

        def matches(cls: type) -> bool:
            module = getattr(cls, "__module__", "") or ""
            return any(
                module == prefix or module.startswith(f"{prefix}.") for prefix in cleaned
            )

        return ClassFilter(matches, f"in_module({', '.join(cleaned)})")
