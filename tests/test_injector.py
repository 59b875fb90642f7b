from __future__ import annotations

import pytest

from svcreg_core.errors import (
    ArgumentTypeMismatchError,
    MissingArgumentError,
    NoViableConstructorError,
    ProviderConstructionError,
    ProviderNotFoundError,
    ServiceNotFoundError,
)
from svcreg_core.inject import constructors_of, fields_of
from svcreg_core.registry import ServiceRegistry
from testclasses.consumers import (
    ComboInjected,
    ConstructorInjected,
    DefaultedParameter,
    DiscountedGreeting,
    Exploding,
    FallbackConstructor,
    FieldInjected,
    MarkedConstructor,
    MissingNamedField,
    MixedArgs,
    MixedArgsWithDefault,
    NamedFieldInjected,
    NamedParameter,
    PositionalAfterDefault,
    PricedGreeting,
    PricedTeapot,
    ReadOnly,
    RegistryAware,
    TwoConstructors,
    Unbuildable,
    UnmarkedMixedArgs,
)
from testclasses.contracts import GreetingService, NamedInjectService, TeapotService
from testclasses.providers import (
    FormalGreeter,
    LoudGreeter,
    NamedServiceB,
    SingletonTeapot,
)


def test_constructor_injection(registry: ServiceRegistry) -> None:
    instance = registry.load_class(ConstructorInjected)

    assert isinstance(instance.teapot, SingletonTeapot)
    assert isinstance(instance.greeter, LoudGreeter)


def test_field_injection(registry: ServiceRegistry) -> None:
    instance = registry.load_class(FieldInjected)

    assert isinstance(instance.teapot, TeapotService)
    assert isinstance(instance.greeter, GreetingService)


def test_constructor_and_field_injection_combine(registry: ServiceRegistry) -> None:
    instance = registry.load_class(ComboInjected)

    assert isinstance(instance.teapot, SingletonTeapot)
    assert isinstance(instance.greeter, LoudGreeter)


def test_uninjected_field_raises_attribute_error() -> None:
    with pytest.raises(AttributeError, match="has not been injected"):
        FieldInjected().teapot


def test_named_field_injection(registry: ServiceRegistry) -> None:
    instance = registry.load_class(NamedFieldInjected)

    assert isinstance(instance.greeter, FormalGreeter)
    assert isinstance(instance.shouter, LoudGreeter)


def test_named_field_on_a_provider(registry: ServiceRegistry) -> None:
    service = registry.load_service_provider(NamedInjectService)

    assert isinstance(service.named(), NamedServiceB)
    assert service.named().whoami() == "B"


def test_missing_named_field_raises_provider_not_found(registry: ServiceRegistry) -> None:
    with pytest.raises(ProviderNotFoundError) as excinfo:
        registry.load_class(MissingNamedField)
    assert excinfo.value.provider_name == "does-not-exist"


def test_named_constructor_parameter(registry: ServiceRegistry) -> None:
    instance = registry.load_class(NamedParameter)

    assert isinstance(instance.greeter, FormalGreeter)


def test_registry_is_injected_into_itself(registry: ServiceRegistry) -> None:
    instance = registry.load_class(RegistryAware)

    assert instance.registry is registry
    assert isinstance(instance.teapot, TeapotService)


def test_non_injectable_parameter_keeps_its_default(registry: ServiceRegistry) -> None:
    instance = registry.load_class(DefaultedParameter)

    assert instance.label == "kettle"


def test_field_injection_bypasses_custom_setattr(registry: ServiceRegistry) -> None:
    instance = registry.load_class(ReadOnly)

    assert isinstance(instance.greeter, GreetingService)


def test_constructor_choice_is_stable(registry: ServiceRegistry) -> None:
    chosen = {registry.load_class(TwoConstructors).built_by for _ in range(5)}
    selected = {registry.injector.find_constructor(TwoConstructors).attribute for _ in range(5)}

    assert len(chosen) == 1
    assert selected == {"__init__"}


def test_marked_constructor_wins(registry: ServiceRegistry) -> None:
    instance = registry.load_class(MarkedConstructor)

    assert instance.built_by == "from_greeter"
    assert isinstance(instance.greeter, LoudGreeter)


def test_first_viable_constructor_is_used(registry: ServiceRegistry) -> None:
    instance = registry.load_class(FallbackConstructor)

    assert instance.built_by == "create"


def test_no_viable_constructor(registry: ServiceRegistry) -> None:
    with pytest.raises(NoViableConstructorError) as excinfo:
        registry.load_class(Unbuildable)
    assert excinfo.value.concrete_type is Unbuildable
    assert "testclasses.consumers.Unbuildable" in str(excinfo.value)


def test_constructor_errors_are_wrapped(registry: ServiceRegistry) -> None:
    with pytest.raises(ProviderConstructionError, match="RuntimeError: boom"):
        registry.load_class(Exploding)


def test_mixed_arguments(registry: ServiceRegistry) -> None:
    instance = registry.load_class(MixedArgs, "Test", 2)

    assert isinstance(instance.teapot, TeapotService)
    assert instance.name == "Test"
    assert instance.repeat == 2
    assert instance.echo_name() == "Test\nTest"


def test_mixed_arguments_missing_value(registry: ServiceRegistry) -> None:
    with pytest.raises(MissingArgumentError) as excinfo:
        registry.load_class(MixedArgs, "Test")
    assert excinfo.value.param_name == "repeat"
    assert excinfo.value.param_type is int
    assert "repeat" in str(excinfo.value)


def test_mixed_arguments_wrong_order(registry: ServiceRegistry) -> None:
    with pytest.raises(ArgumentTypeMismatchError) as excinfo:
        registry.load_class(MixedArgs, 2, "Test")
    assert excinfo.value.param_name == "name"
    assert excinfo.value.expected is str


def test_mixed_arguments_fall_back_to_defaults(registry: ServiceRegistry) -> None:
    instance = registry.load_class(MixedArgsWithDefault, "Test")

    assert instance.repeat == 3


def test_mixed_arguments_ignore_surplus_values(registry: ServiceRegistry) -> None:
    instance = registry.load_class(MixedArgs, "Test", 1, "extra")

    assert instance.echo_name() == "Test"


def test_mixed_arguments_require_a_marked_constructor(registry: ServiceRegistry) -> None:
    with pytest.raises(NoViableConstructorError):
        registry.load_class(UnmarkedMixedArgs, "Test")


def test_missing_service_for_a_resolved_dependency() -> None:
    empty = ServiceRegistry(scanners={})

    with pytest.raises(ServiceNotFoundError):
        empty.injector.resolve(TeapotService)


def test_introspection_describes_constructors_and_fields() -> None:
    specs = constructors_of(MarkedConstructor)
    fields = {field.name: field for field in fields_of(NamedFieldInjected)}

    assert [spec.attribute for spec in specs] == ["__init__", "from_greeter"]
    assert [spec.marked for spec in specs] == [False, True]
    assert [parameter.name for parameter in specs[0].parameters] == ["teapot", "greeter"]
    assert fields["greeter"].annotation is GreetingService
    assert fields["greeter"].provider_name == "formal"
    assert fields["shouter"].provider_name == "loud"


def test_unresolvable_hint_keeps_the_other_parameters(registry: ServiceRegistry) -> None:
    instance = registry.load_class(PricedTeapot)

    assert isinstance(instance.teapot, TeapotService)
    assert instance.price is None


def test_unresolvable_class_hint_keeps_injected_fields(registry: ServiceRegistry) -> None:
    priced = registry.load_class(PricedGreeting)
    discounted = registry.load_class(DiscountedGreeting)

    assert isinstance(priced.greeter, LoudGreeter)
    assert isinstance(discounted.greeter, LoudGreeter)
    assert isinstance(discounted.shouter, LoudGreeter)
    assert discounted.discount is None


def test_positional_only_value_after_an_omitted_default_is_rejected(
    registry: ServiceRegistry,
) -> None:
    with pytest.raises(ProviderConstructionError) as excinfo:
        registry.load_class(PositionalAfterDefault)

    assert excinfo.value.concrete_type is PositionalAfterDefault
    assert "teapot" in excinfo.value.reason
