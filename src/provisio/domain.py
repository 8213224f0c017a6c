"""Domain models used throughout the registry."""

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from provisio.errors import InvalidRegistration

__all__ = ["EntryState", "Provider"]


class EntryState(Enum):
    """The lifecycle state of a single key in a registry."""

    UNREGISTERED = "unregistered"
    PROVIDED = "provided"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class Provider:
    """A registered, not yet invoked producer of a value.

    Attributes:
        key: The key the produced value is registered under.
        func: The callable producing the value.
        receives_registry: Whether ``func`` is called with the registry as its single
            argument (otherwise it is called with no arguments).
    """

    key: str
    func: Callable
    receives_registry: bool

    @classmethod
    def of(cls, key: str, func: Any) -> "Provider":
        """Wrap ``func`` after checking that it is a valid producer.

        Raises:
            InvalidRegistration: If ``func`` is not callable, or cannot be called with
                either no arguments or the registry alone.
        """
        if not callable(func):
            raise InvalidRegistration(f"provider for '{key}' must be callable, got {func!r}")
        return cls(key, func, _receives_registry(key, func))

    def invoke(self, registry: Any) -> Any:
        if self.receives_registry:
            return self.func(registry)
        return self.func()


def _receives_registry(key: str, func: Callable) -> bool:
    """Decide how a producer is called from its signature.

    A signature that accepts a single argument receives the registry, including ones
    where that argument is optional or variadic; one that accepts no arguments is
    called bare. Builtin types and signatures that cannot be inspected are called bare.

    Example:
        >>> _receives_registry("k", lambda: 1)                # False
        >>> _receives_registry("k", lambda registry: 1)       # True
        >>> _receives_registry("k", lambda registry=None: 1)  # True
        >>> _receives_registry("k", list)                     # False
    """
    if inspect.isclass(func) and func.__module__ == "builtins":
        return False
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return False

    if _binds(sig, None):
        return True
    if _binds(sig):
        return False

    raise InvalidRegistration(
        f"provider for '{key}' must accept no arguments or the registry alone, "
        f"but has signature {sig}"
    )


def _binds(sig: inspect.Signature, *args) -> bool:
    try:
        sig.bind(*args)
    except TypeError:
        return False
    return True
