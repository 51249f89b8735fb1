import functools
from abc import ABC
from typing import Optional, Protocol, Sequence, runtime_checkable

import pytest

from bindery.domain import Dependency
from bindery.errors import BindingError
from bindery.introspection import make_producer
from bindery.registry import Registry
from id_givers import (
    CompositeIDAggregator,
    FirstIDGiver,
    PrimaryIDGiver,
    SecondaryIDGiver,
    new_aggregator,
    new_first,
)


@pytest.fixture
def registry():
    return Registry()


@runtime_checkable
class Greeter(Protocol):
    def greet(self) -> str: ...


class Named(Protocol):
    def name(self) -> str: ...


class English:
    def greet(self) -> str:
        return "hello"


class Formal(Named):
    def name(self) -> str:
        return "Sir"


def make_english() -> English:
    return English()


def make_formal() -> Formal:
    return Formal()


def test_producer_dependencies_are_identified():
    producer = make_producer(new_aggregator)

    assert producer.output is CompositeIDAggregator
    assert not producer.fallible
    assert producer.dependencies == [
        Dependency("primary_id_givers", PrimaryIDGiver, True),
        Dependency("secondary_id_giver", SecondaryIDGiver, False),
    ]


def test_class_producer_outputs_itself():
    producer = make_producer(CompositeIDAggregator)

    assert producer.output is CompositeIDAggregator
    assert [d.parameter_name for d in producer.dependencies] == [
        "primary_id_givers",
        "secondary_id_giver",
    ]


def test_sequence_alias_collects_all():
    def make(givers: Sequence[PrimaryIDGiver]) -> FirstIDGiver:
        return FirstIDGiver(len(givers))

    assert make_producer(make).dependencies == [Dependency("givers", PrimaryIDGiver, True)]


def test_fallible_producer_is_identified():
    def make() -> tuple[FirstIDGiver, Optional[ValueError]]:
        return FirstIDGiver(1), None

    producer = make_producer(make)
    assert producer.output is FirstIDGiver
    assert producer.fallible


def test_optional_primary_output_is_unwrapped():
    def make() -> tuple[Optional[FirstIDGiver], Optional[ValueError]]:
        return None, ValueError("unavailable")

    producer = make_producer(make)
    assert producer.output is FirstIDGiver
    assert producer.fallible


def test_partial_producer():
    def make(number: PrimaryIDGiver, preset: SecondaryIDGiver) -> FirstIDGiver:
        return FirstIDGiver(1)

    producer = make_producer(functools.partial(make, preset=None))
    assert producer.output is FirstIDGiver
    assert [d.parameter_name for d in producer.dependencies] == ["number"]


def test_not_a_callable(registry):
    with pytest.raises(BindingError, match="5 is not callable"):
        registry.bind(PrimaryIDGiver, 5)


@pytest.mark.parametrize("capability", [int, str, float, type(None)])
def test_value_type_capability(registry, capability):
    def make() -> int:
        return 5

    with pytest.raises(BindingError, match="is a value type"):
        registry.bind(capability, make)


def test_generic_alias_capability(registry):
    with pytest.raises(BindingError, match="is not a class"):
        registry.bind(list[PrimaryIDGiver], new_first)


def test_output_does_not_satisfy_capability(registry):
    def make() -> English:
        return English()

    with pytest.raises(BindingError, match="does not satisfy PrimaryIDGiver"):
        registry.bind(PrimaryIDGiver, make)


def test_no_output_declared(registry):
    def make():
        return FirstIDGiver(1)

    with pytest.raises(BindingError, match="does not declare an output type"):
        registry.bind(PrimaryIDGiver, make)


def test_none_output_declared(registry):
    def make() -> None:
        pass

    with pytest.raises(BindingError, match="does not declare an output type"):
        registry.bind(PrimaryIDGiver, make)


def test_output_not_a_class(registry):
    def make() -> list[FirstIDGiver]:
        return []

    with pytest.raises(BindingError, match="is not a class"):
        registry.bind(PrimaryIDGiver, make)


def test_secondary_output_not_an_error(registry):
    def make() -> tuple[FirstIDGiver, int]:
        return FirstIDGiver(1), 0

    with pytest.raises(BindingError, match="which is not an exception type"):
        registry.bind(PrimaryIDGiver, make)


def test_too_many_outputs(registry):
    def make() -> tuple[FirstIDGiver, ValueError, ValueError]:
        return FirstIDGiver(1), None, None

    with pytest.raises(BindingError, match="must declare a single output"):
        registry.bind(PrimaryIDGiver, make)


def test_primitive_dependency(registry):
    def make(a: int) -> FirstIDGiver:
        return FirstIDGiver(a)

    with pytest.raises(BindingError, match="Dependency 'a' of .* is not a capability"):
        registry.bind(PrimaryIDGiver, make)


def test_unannotated_dependency(registry):
    def make(a) -> FirstIDGiver:
        return FirstIDGiver(a)

    with pytest.raises(BindingError, match="Dependency 'a' of .* is not annotated"):
        registry.bind(PrimaryIDGiver, make)


def test_variadic_dependency(registry):
    def make(*givers: PrimaryIDGiver) -> FirstIDGiver:
        return FirstIDGiver(len(givers))

    with pytest.raises(BindingError, match="parameter 'givers' is variadic"):
        registry.bind(PrimaryIDGiver, make)


def test_failed_bind_leaves_registry_unchanged(registry):
    registry.bind(PrimaryIDGiver, new_first)

    def make() -> English:
        return English()

    with pytest.raises(BindingError):
        registry.bind(PrimaryIDGiver, make)

    assert registry.bound_producers(PrimaryIDGiver) == [new_first]


def test_failed_provides_binds_nothing(registry):
    with pytest.raises(BindingError):

        @registry.provides(FirstIDGiver, English)
        def make() -> FirstIDGiver:
            return FirstIDGiver(1)

    assert FirstIDGiver not in registry


def test_abc_registration_declares_conformance(registry):
    class Capability(ABC):
        pass

    Capability.register(English)
    registry.bind(Capability, make_english)

    assert isinstance(registry.resolve(Capability), English)


def test_runtime_checkable_protocol_is_structural(registry):
    registry.bind(Greeter, make_english)

    assert registry.resolve(Greeter).greet() == "hello"


def test_plain_protocol_requires_inheritance(registry):
    registry.bind(Named, make_formal)

    assert registry.resolve(Named).name() == "Sir"

    with pytest.raises(BindingError, match="does not satisfy Named"):
        registry.bind(Named, make_english)
