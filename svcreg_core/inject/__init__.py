"""Constructor and field injection."""

from .injector import Injector
from .introspection import (
    ConstructorSpec,
    FieldSpec,
    ParameterSpec,
    constructors_of,
    fields_of,
)

__all__ = [
    "ConstructorSpec",
    "FieldSpec",
    "Injector",
    "ParameterSpec",
    "constructors_of",
    "fields_of",
]
