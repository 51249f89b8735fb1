"""Validation and introspection of capability types and producers.

Producers describe themselves through standard type hints: the return
annotation names the instance they produce, and each annotated parameter names
a capability that must be resolved before the producer is invoked.
"""

import collections.abc
import functools
import inspect
import types
from typing import Any, Callable, Union, get_args, get_origin, get_type_hints

from bindery.domain import Dependency, Producer, describe
from bindery.errors import BindingError

__all__ = ["check_capability", "check_satisfies", "make_producer"]


VALUE_TYPES = frozenset(
    {int, float, complex, bool, str, bytes, tuple, frozenset, type(None)}
)
"""Builtin types whose instances have value semantics and cannot be shared safely."""

SEQUENCE_ORIGINS = frozenset({list, collections.abc.Sequence})
"""Origins of the generic aliases that request every producer of a capability."""


def check_capability(capability: Any) -> type:
    """Ensure ``capability`` can be used as a binding key.

    Args:
        capability: The candidate capability type.

    Returns:
        The capability, unchanged.

    Raises:
        BindingError: If the capability is not a class, is a parameterised
            generic alias, or is a builtin value type.
    """
    if get_origin(capability) is not None or not inspect.isclass(capability):
        raise BindingError(f"{capability!r} is not a class and cannot be used as a capability")
    if capability in VALUE_TYPES:
        raise BindingError(
            f"{describe(capability)} is a value type and cannot be used as a capability"
        )
    return capability


def check_satisfies(producer: Producer, capability: type):
    """Ensure the producer's output satisfies ``capability``.

    Conformance is tested with ``issubclass``, so ABCs may declare conformance
    explicitly with ``Capability.register(Implementation)``. Protocols that do
    not support class checks fall back to nominal inheritance.

    Raises:
        BindingError: If the output does not satisfy the capability.
    """
    if not _satisfies(producer.output, capability):
        raise BindingError(
            f"Producer {producer.name} produces {describe(producer.output)}, "
            f"which does not satisfy {describe(capability)}"
        )


def make_producer(target: Any) -> Producer:
    """Create a :class:`Producer` from a callable.

    Classes produce instances of themselves and declare their inputs through
    ``__init__``. Every other callable must annotate its return type, either as
    a class or as an ``(instance, error)`` pair such as
    ``tuple[Service, Optional[Exception]]``.

    Args:
        target: The callable to analyse.

    Returns:
        The validated producer.

    Raises:
        BindingError: If the callable is not callable, declares no output,
            declares a malformed output, or has a parameter that is not a
            capability or a list of capabilities.

    Example:
        >>> def make_service(db: Database, plugins: list[Plugin]) -> Service:
        ...     return Service(db, plugins)
        >>> producer = make_producer(make_service)
        >>> # producer.output == Service
        >>> # producer.dependencies == [
        >>> #     Dependency("db", Database, False),
        >>> #     Dependency("plugins", Plugin, True)]
    """
    if not callable(target):
        raise BindingError(f"{target!r} is not callable")

    hints = _get_hints(target)
    if inspect.isclass(target):
        output, fallible = target, False
    else:
        output, fallible = _get_output(target, hints.get("return"))

    return Producer(target, output, fallible, _get_dependencies(target, hints))


def _satisfies(output: type, capability: type) -> bool:
    try:
        return issubclass(output, capability)
    except TypeError:
        return capability in inspect.getmro(output)


def _annotated_callable(target: Any) -> Callable:
    """Return the function whose annotations describe ``target``."""
    if inspect.isclass(target):
        return target.__init__
    if isinstance(target, functools.partial):
        return _annotated_callable(target.func)
    if inspect.isfunction(target) or inspect.ismethod(target):
        return target
    return type(target).__call__


def _get_hints(target: Any) -> dict[str, Any]:
    try:
        return get_type_hints(_annotated_callable(target))
    except (NameError, TypeError) as e:
        raise BindingError(f"Cannot read type hints of {describe(target)}: {e}") from e


def _get_output(target: Any, annotation: Any) -> tuple[type, bool]:
    """Determine the primary output of a producer and whether it is fallible.

    Args:
        target: The producer, used for error messages.
        annotation: The resolved return annotation, or None if absent.

    Returns:
        A pair of the output class and the fallible flag.
    """
    if annotation is None or annotation is type(None):
        raise BindingError(f"Producer {describe(target)} does not declare an output type")

    fallible = get_origin(annotation) is tuple
    if fallible:
        args = get_args(annotation)
        if len(args) != 2 or args[1] is Ellipsis:
            raise BindingError(
                f"Producer {describe(target)} must declare a single output, "
                f"optionally paired with an error: got {annotation!r}"
            )
        annotation, failure = _strip_optional(args[0]), args[1]
        if not _is_failure_type(failure):
            raise BindingError(
                f"Producer {describe(target)} declares a secondary output "
                f"{failure!r} which is not an exception type"
            )

    if get_origin(annotation) is not None or not inspect.isclass(annotation):
        raise BindingError(
            f"Producer {describe(target)} output {annotation!r} is not a class"
        )
    return annotation, fallible


def _strip_optional(annotation: Any) -> Any:
    """Return ``X`` for ``Optional[X]`` or ``X | None``, otherwise ``annotation``."""
    if get_origin(annotation) in (Union, types.UnionType):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def _is_failure_type(annotation: Any) -> bool:
    annotation = _strip_optional(annotation)
    return inspect.isclass(annotation) and issubclass(annotation, BaseException)


def _get_dependencies(target: Any, hints: dict[str, Any]) -> list[Dependency]:
    """Extract the inputs of a producer from its signature.

    Args:
        target: The producer to analyse.
        hints: Its resolved type hints.

    Returns:
        One :class:`Dependency` per parameter, in signature order. Keywords
        already supplied by a ``functools.partial`` are not dependencies.
    """
    try:
        sig = inspect.signature(target)
    except (TypeError, ValueError) as e:
        raise BindingError(f"Cannot read signature of {describe(target)}: {e}") from e

    preset = target.keywords if isinstance(target, functools.partial) else {}
    dependencies = []
    for parameter in sig.parameters.values():
        if parameter.name in preset:
            continue
        if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
            raise BindingError(
                f"Producer {describe(target)} parameter '{parameter.name}' is variadic"
            )
        annotation = hints.get(parameter.name)
        if annotation is None:
            raise BindingError(
                f"Dependency '{parameter.name}' of {describe(target)} is not annotated"
            )
        dependencies.append(_make_dependency(target, parameter, annotation))
    return dependencies


def _make_dependency(target: Any, parameter: inspect.Parameter, annotation: Any) -> Dependency:
    positional_only = parameter.kind == parameter.POSITIONAL_ONLY
    collects_all = get_origin(annotation) in SEQUENCE_ORIGINS
    if collects_all:
        args = get_args(annotation)
        annotation = args[0] if len(args) == 1 else None

    try:
        capability = check_capability(annotation)
    except BindingError as e:
        raise BindingError(
            f"Dependency '{parameter.name}' of {describe(target)} "
            f"is not a capability or a list of capabilities: {e}"
        ) from e

    return Dependency(parameter.name, capability, collects_all, positional_only)
