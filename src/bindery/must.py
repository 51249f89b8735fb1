"""Variants of the bind and resolve functions that abort instead of raising.

Each ``must_`` function has the same contract as its counterpart in
:mod:`bindery.default`, except that a :class:`~bindery.errors.BinderyError` is
logged and converted into :class:`SystemExit`. Use them in application wiring
code where a broken object graph leaves nothing sensible to do but stop.
"""

import logging
from contextlib import contextmanager
from typing import Callable, TypeVar

from bindery import default
from bindery.errors import BinderyError
from bindery.registry import Registry

__all__ = [
    "must_bind",
    "must_bind_instance",
    "must_resolve_all",
    "must_resolve_all_instance",
    "must_resolve",
    "must_resolve_instance",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = TypeVar("P", bound=Callable)


@contextmanager
def _aborting():
    try:
        yield
    except BinderyError as e:
        logger.critical("Aborting: %s", e)
        raise SystemExit(str(e)) from e


def must_bind(capability: type, producer: P) -> P:
    """Bind a producer to a capability type in the global registry."""
    with _aborting():
        return default.bind(capability, producer)


def must_bind_instance(registry: Registry, capability: type, producer: P) -> P:
    """Bind a producer to a capability type in the given registry."""
    with _aborting():
        return default.bind_instance(registry, capability, producer)


def must_resolve_all(capability: type[T]) -> list[T]:
    """Resolve all concretes bound to a capability in the global registry."""
    with _aborting():
        return default.resolve_all(capability)


def must_resolve_all_instance(registry: Registry, capability: type[T]) -> list[T]:
    """Resolve all concretes bound to a capability in the given registry."""
    with _aborting():
        return default.resolve_all_instance(registry, capability)


def must_resolve(capability: type[T]) -> T:
    """Resolve a single concrete from the global registry.

    If multiple producers were bound, the concrete from the most recent one
    is returned.
    """
    with _aborting():
        return default.resolve(capability)


def must_resolve_instance(registry: Registry, capability: type[T]) -> T:
    """Resolve a single concrete from the given registry."""
    with _aborting():
        return default.resolve_instance(registry, capability)
