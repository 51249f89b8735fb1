"""Bindery: lazy, type-indexed dependency resolution.

Bindery maps capability types (what a caller needs) to producers (how to
build one). Producers are plain callables that describe their output and
their dependencies with standard type hints. Nothing is built until a
capability is resolved; each producer is then invoked at most once and its
instance is shared by every capability it was bound under.

Key Features:
    - Any number of producers per capability; the last bound wins ``resolve``
    - ``list[X]`` parameters receive every producer of ``X``, in binding order
    - Producers may report failure by returning an ``(instance, error)`` pair
    - Cycle detection during resolution
    - Independent registries alongside a process-wide default

Basic Usage:
    >>> from bindery.registry import Registry
    >>>
    >>> registry = Registry()
    >>>
    >>> @registry.provides(Database)
    >>> def make_database() -> PostgresDatabase:
    ...     return PostgresDatabase()
    >>>
    >>> db = registry.resolve(Database)

The package consists of several modules:
    - registry: The Registry, its binding table and instance cache
    - default: The global registry and functions forwarding to it
    - must: Variants of the default functions that abort on error
    - introspection: Validation of capabilities and producers
    - invocation: Invoking a producer and converting its failures
    - domain: Core domain models (Dependency, Producer)
    - errors: Framework-specific exceptions
"""
