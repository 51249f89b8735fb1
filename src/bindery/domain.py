"""Domain models used throughout the registry."""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Hashable


@dataclass(frozen=True)
class Dependency:
    """Represents one declared input of a producer.

    Attributes:
        parameter_name: The parameter name in the producer's signature.
        capability: The capability type the parameter requires.
        collects_all: True if the parameter asks for every producer of the
            capability (``list[X]``), False if it asks for a single instance.
        positional_only: True if the argument must be passed positionally.
    """

    parameter_name: str
    capability: type
    collects_all: bool
    positional_only: bool = False


@dataclass(frozen=True)
class Producer:
    """Validated description of a callable bound to one or more capabilities.

    A ``Producer`` is created once per callable, the first time it is bound,
    and is shared by every capability the callable is later bound under.

    Attributes:
        func: The callable itself. Its identity is the producer's identity.
        output: The class of the instance the callable produces.
        fallible: True if the callable returns an ``(instance, error)`` pair.
        dependencies: The inputs to resolve before invoking ``func``.
    """

    func: Callable
    output: type
    fallible: bool
    dependencies: list[Dependency]

    @property
    def key(self) -> Hashable:
        return producer_key(self.func)

    @property
    def name(self) -> str:
        return describe(self.func)


def producer_key(func: Callable) -> Hashable:
    """Return the identity of a producer.

    Bound methods are recreated on every attribute access, so two accesses to
    ``factory.make`` identify the same producer through the instance and the
    underlying function. Every other callable is identified by the object
    itself. A :class:`Producer` holds on to its ``func``, and with it any
    ``__self__``, so the ids in a key stay valid while it is registered.
    """
    if inspect.ismethod(func):
        return id(func.__self__), func.__func__
    return id(func)


def describe(target: Any) -> str:
    """Return a readable name for a capability type or callable."""
    return getattr(target, "__qualname__", None) or repr(target)
