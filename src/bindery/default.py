"""The process-wide default registry and the functions that forward to it.

``GLOBAL`` lives for the lifetime of the process. Every function here without
an ``_instance`` suffix operates on it; the ``_instance`` variants take the
registry to operate on explicitly.
"""

from typing import Callable, TypeVar

from bindery.registry import Registry

__all__ = [
    "GLOBAL",
    "bind",
    "bind_instance",
    "resolve_all",
    "resolve_all_instance",
    "resolve",
    "resolve_instance",
    "empty",
    "empty_instance",
    "provides",
]

T = TypeVar("T")
P = TypeVar("P", bound=Callable)

GLOBAL = Registry()


def bind(capability: type, producer: P) -> P:
    """Bind a producer to a capability type in the global registry.

    Raises:
        BindingError: If the capability or the producer is invalid.
    """
    return bind_instance(GLOBAL, capability, producer)


def bind_instance(registry: Registry, capability: type, producer: P) -> P:
    """Bind a producer to a capability type in the given registry.

    Raises:
        BindingError: If the capability or the producer is invalid.
    """
    return registry.bind(capability, producer)


def resolve_all(capability: type[T]) -> list[T]:
    """Resolve all concretes bound to a capability in the global registry.

    Raises:
        ResolutionError: If the capability cannot be resolved.
    """
    return resolve_all_instance(GLOBAL, capability)


def resolve_all_instance(registry: Registry, capability: type[T]) -> list[T]:
    """Resolve all concretes bound to a capability in the given registry.

    Raises:
        ResolutionError: If the capability cannot be resolved.
    """
    return registry.resolve_all(capability)


def resolve(capability: type[T]) -> T:
    """Resolve a single concrete from the global registry.

    If multiple producers were bound, the concrete from the most recent one
    is returned.

    Raises:
        ResolutionError: If the capability cannot be resolved.
    """
    return resolve_instance(GLOBAL, capability)


def resolve_instance(registry: Registry, capability: type[T]) -> T:
    """Resolve a single concrete from the given registry.

    Raises:
        ResolutionError: If the capability cannot be resolved.
    """
    return registry.resolve(capability)


def empty():
    """Return the global registry to its initial, empty state."""
    empty_instance(GLOBAL)


def empty_instance(registry: Registry):
    """Return the given registry to its initial, empty state."""
    registry.empty()


def provides(*capabilities: type) -> Callable[[P], P]:
    """Decorator binding a producer in the global registry.

    See :meth:`Registry.provides`.
    """
    return GLOBAL.provides(*capabilities)
