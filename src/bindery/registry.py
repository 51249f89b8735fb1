"""The binding table and instance cache at the heart of bindery.

A :class:`Registry` maps capability types to the producers known to satisfy
them. Producers are invoked lazily, the first time any capability they are
bound under is resolved, and their instances are cached by producer identity
for the lifetime of the registry.

Registries are not thread safe. Callers sharing one registry between threads
must serialise every call to ``bind``, ``resolve``, ``resolve_all`` and
``empty`` themselves, or give each thread its own registry.
"""

import logging
from typing import Any, Callable, Hashable, TypeVar

from bindery.domain import Producer, describe, producer_key
from bindery.errors import CyclicDependencyError, ResolutionError
from bindery.introspection import check_capability, check_satisfies, make_producer
from bindery.invocation import invoke

__all__ = ["Registry"]

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = TypeVar("P", bound=Callable)


class Registry:
    """Registry of producers, supporting binding and lazy, memoised resolution.

    Attributes:
        strict_sequences: If True, a ``list[X]`` dependency fails to resolve when
            nothing is bound to ``X``. If False (the default) it receives an
            empty list.

    Example:
        >>> registry = Registry()
        >>> registry.bind(NameGiver, make_dano)
        >>> registry.bind(NameGiver, make_joe)
        >>> registry.resolve_all(NameGiver)   # [<Dano>, <Joe>]
        >>> registry.resolve(NameGiver)       # <Joe>, the most recently bound
    """

    def __init__(self, strict_sequences: bool = False):
        self.strict_sequences = strict_sequences
        self._bindings: dict[type, list[Producer]] = {}
        self._producers: dict[Hashable, Producer] = {}
        self._instances: dict[Hashable, Any] = {}

    def bind(self, capability: type, producer: P) -> P:
        """Bind a producer to a capability type.

        If the producer is already bound to the capability it is moved to the
        end of the binding, making it the one returned by :meth:`resolve`.
        Nothing is changed if validation fails.

        Args:
            capability: The class the producer's output must satisfy.
            producer: A callable whose return annotation names its output and
                whose annotated parameters name its dependencies.

        Returns:
            The producer, unchanged.

        Raises:
            BindingError: If the capability or the producer is invalid.
        """
        record = self._prepare(capability, producer)
        self._commit(capability, record)
        return producer

    def provides(self, *capabilities: type) -> Callable[[P], P]:
        """Decorator to bind a producer under one or more capabilities.

        Args:
            capabilities: The capability types to bind the producer to. If none
                are given, the producer is bound to its own output type.

        Returns:
            A decorator that binds the producer and returns it unchanged.

        Example:
            @registry.provides(PrimaryIDGiver, SecondaryIDGiver)
            def make_id_giver() -> IDGiver:
                return IDGiver()
        """

        def decorator(producer: P) -> P:
            targets = capabilities or (self._record_for(producer).output,)
            records = [(capability, self._prepare(capability, producer)) for capability in targets]
            for capability, record in records:
                self._commit(capability, record)
            return producer

        return decorator

    def resolve_all(self, capability: type[T]) -> list[T]:
        """Resolve every producer bound to a capability.

        Args:
            capability: The capability type to resolve.

        Returns:
            The instances of all producers bound to the capability, in binding
            order.

        Raises:
            ResolutionError: If nothing is bound to the capability, or if any
                producer or any of its dependencies fails to resolve.
        """
        return self._resolve_all(capability, {})

    def resolve(self, capability: type[T]) -> T:
        """Resolve the most recently bound producer of a capability.

        All producers bound to the capability are instantiated, exactly as
        with :meth:`resolve_all`; the last one wins.

        Raises:
            ResolutionError: If the capability cannot be resolved.
        """
        instances = self.resolve_all(capability)
        if not instances:
            raise ResolutionError(f"No instances resolved for {describe(capability)}")
        return instances[-1]

    def empty(self):
        """Discard all bindings and cached instances."""
        self._bindings, self._producers, self._instances = {}, {}, {}

    def bound_producers(self, capability: type) -> list[Callable]:
        """Return the producers bound to a capability, in binding order."""
        return [record.func for record in self._bindings.get(capability, [])]

    def is_resolved(self, producer: Callable) -> bool:
        """Return True if the producer has been invoked and its instance cached."""
        return producer_key(producer) in self._instances

    def __contains__(self, capability: type) -> bool:
        return bool(self._bindings.get(capability))

    def _record_for(self, producer: Callable) -> Producer:
        record = self._producers.get(producer_key(producer))
        return record if record is not None else make_producer(producer)

    def _prepare(self, capability: type, producer: Callable) -> Producer:
        check_capability(capability)
        record = self._record_for(producer)
        check_satisfies(record, capability)
        return record

    def _commit(self, capability: type, record: Producer):
        bound = [
            existing
            for existing in self._bindings.get(capability, [])
            if existing.key != record.key
        ]
        bound.append(record)
        self._bindings[capability] = bound
        self._producers.setdefault(record.key, record)
        logger.debug(
            "Bound %s to %s (%d producers)", record.name, describe(capability), len(bound)
        )

    def _resolve_all(self, capability: type, in_progress: dict[Hashable, Producer]) -> list:
        bound = self._bindings.get(capability)
        if not bound:
            raise ResolutionError(f"No producers bound for {describe(capability)}")
        return [self._instantiate(record, in_progress) for record in bound]

    def _collect(self, capability: type, in_progress: dict[Hashable, Producer]) -> list:
        if capability not in self and not self.strict_sequences:
            return []
        return self._resolve_all(capability, in_progress)

    def _instantiate(self, record: Producer, in_progress: dict[Hashable, Producer]) -> Any:
        """Return the cached instance of a producer, invoking it if needed.

        Args:
            record: The producer to instantiate.
            in_progress: Producers currently being instantiated in this
                resolution pass, in the order they were entered.

        Raises:
            CyclicDependencyError: If the producer is already in progress.
            ResolutionError: If the producer or one of its dependencies fails.
        """
        if record.key in self._instances:
            return self._instances[record.key]

        if record.key in in_progress:
            start = list(in_progress).index(record.key)
            cycle = list(in_progress.values())[start:] + [record]
            raise CyclicDependencyError(
                "Dependency cycle detected: " + " -> ".join(r.name for r in cycle)
            )

        in_progress[record.key] = record
        try:
            arguments = self._resolve_arguments(record, in_progress)
            logger.debug("Invoking producer %s", record.name)
            instance = invoke(record, arguments)
        finally:
            del in_progress[record.key]

        self._instances[record.key] = instance
        return instance

    def _resolve_arguments(
        self, record: Producer, in_progress: dict[Hashable, Producer]
    ) -> dict[str, Any]:
        arguments = {}
        for dependency in record.dependencies:
            try:
                if dependency.collects_all:
                    value = self._collect(dependency.capability, in_progress)
                else:
                    value = self._resolve_all(dependency.capability, in_progress)[-1]
            except CyclicDependencyError:
                raise
            except ResolutionError as e:
                raise ResolutionError(
                    f"Cannot resolve dependency '{dependency.parameter_name}' "
                    f"of {record.name}: {e}"
                ) from e
            arguments[dependency.parameter_name] = value
        return arguments
