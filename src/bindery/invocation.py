"""Invocation of a single producer.

This module calls a producer with its already-resolved arguments and turns
every way the call can fail (an exception raised by the producer, an error
returned through its secondary output, or an instance of the wrong type)
into a :class:`~bindery.errors.ResolutionError`.
"""

from typing import Any

from bindery.domain import Dependency, Producer, describe
from bindery.errors import ResolutionError

__all__ = ["invoke"]


def invoke(producer: Producer, arguments: dict[str, Any]) -> Any:
    """Invoke a producer and return the instance it produces.

    Args:
        producer: The producer being executed.
        arguments: Mapping of parameter names to resolved dependencies.

    Returns:
        The produced instance.

    Raises:
        ResolutionError: If the producer raises, reports an error through its
            secondary output, or produces something other than its declared
            output type.
    """
    args, kwargs = _split_arguments(producer.dependencies, arguments)
    try:
        result = producer.func(*args, **kwargs)
    except Exception as e:
        raise ResolutionError(
            f"Producer {producer.name} failed: {type(e).__name__}: {e}"
        ) from e

    instance = _unpack(producer, result) if producer.fallible else result
    _check_output(producer, instance)
    return instance


def _split_arguments(
    dependencies: list[Dependency], arguments: dict[str, Any]
) -> tuple[list[Any], dict[str, Any]]:
    args = [
        arguments[dependency.parameter_name]
        for dependency in dependencies
        if dependency.positional_only
    ]
    kwargs = {
        dependency.parameter_name: arguments[dependency.parameter_name]
        for dependency in dependencies
        if not dependency.positional_only
    }
    return args, kwargs


def _unpack(producer: Producer, result: Any) -> Any:
    """Split the ``(instance, error)`` pair returned by a fallible producer."""
    if not isinstance(result, tuple) or len(result) != 2:
        raise ResolutionError(
            f"Producer {producer.name} declares an (instance, error) output "
            f"but returned {type(result).__name__}"
        )

    instance, failure = result
    if failure is None:
        return instance
    if isinstance(failure, BaseException):
        raise ResolutionError(f"Producer {producer.name} reported failure: {failure}") from failure
    raise ResolutionError(
        f"Producer {producer.name} returned {failure!r} in place of an error"
    )


def _check_output(producer: Producer, instance: Any):
    try:
        matches = isinstance(instance, producer.output)
    except TypeError:
        # protocols without runtime checks cannot be tested against instances
        return
    if not matches:
        raise ResolutionError(
            f"Producer {producer.name} produced {type(instance).__name__}, "
            f"expected {describe(producer.output)}"
        )
