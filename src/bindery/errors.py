__all__ = [
    "BinderyError",
    "BindingError",
    "ResolutionError",
    "CyclicDependencyError",
]


class BinderyError(Exception):
    """Base class for every error raised by a registry."""

    pass


class BindingError(BinderyError):
    """Raised when a capability or producer cannot be bound."""

    pass


class ResolutionError(BinderyError):
    """Raised when a capability cannot be resolved to concrete instances."""

    pass


class CyclicDependencyError(ResolutionError):
    """Raised when a producer depends, directly or transitively, on itself."""

    pass
