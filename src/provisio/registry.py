"""Registration and lazy resolution of named dependencies."""

import inspect
import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Iterator, Optional, TYPE_CHECKING

from provisio.domain import EntryState, Provider
from provisio.errors import CircularDependency, InvalidRegistration, NotFound

if TYPE_CHECKING:
    from provisio.loader import ScriptLoader

__all__ = [
    "Registry",
    "inferred_name",
    "ENVIRONMENT_SCRIPT",
    "DEFAULT_SCRIPT",
]

logger = logging.getLogger(__name__)

ENVIRONMENT_SCRIPT = "deps/{environment}/default.py"
DEFAULT_SCRIPT = "deps/default.py"


def inferred_name(target: Any) -> str:
    """Derive a key from class or function name, removing 'make_' prefix if present.

    Example:
        >>> inferred_name(Mailer)         # Returns "Mailer"
        >>> inferred_name(make_database)  # Returns "database"
        >>> inferred_name(mailer)         # Returns "mailer"
    """
    if inspect.isclass(target):
        return target.__name__

    if target.__name__.startswith("make_"):
        return target.__name__[5:]
    else:
        return target.__name__


class Registry:
    """A registry of lazily resolved, process-wide singleton dependencies.

    Each key is either provided (a producer that runs on first ``get``) or published
    (a ready value). The first registration of a key wins; later ``provide`` or
    ``publish`` calls for the same key are ignored, which is what lets environment
    specific registration scripts override the default ones.

    Producers may take the registry as their single argument in order to resolve
    their own dependencies:

        >>> registry = Registry()
        >>> registry.provide("app.db", lambda r: Database(r.get("app.db.url"))) \\
        ...     .publish("app.db.url", "sqlite://")
        >>> db = registry.get("app.db")

    All registry operations are serialised by a single re-entrant lock, so a registry
    can be shared between threads and a producer still runs only once.

    Args:
        loader: Optional loader whose registration scripts are run against the new
            registry: first the scripts of ``environment`` (if any), then the defaults.
        environment: Name of the environment whose scripts take priority.
    """

    def __init__(
        self,
        loader: Optional["ScriptLoader"] = None,
        environment: Optional[str] = None,
    ):
        self.environment = environment
        self._values: dict[str, Any] = {}
        self._providers: dict[str, Provider] = {}
        self._post_construct_hooks: dict[str, list[Callable]] = defaultdict(list)
        self._registration_order: list[str] = []
        self._resolving: dict[str, None] = {}
        self._lock = threading.RLock()

        if loader is not None:
            self._load(loader)

    def provide(self, key: str, provider: Callable) -> "Registry":
        """Register a producer for ``key`` unless the key is already registered.

        Args:
            key: The key identifying the dependency.
            provider: A callable taking either no arguments or the registry.

        Returns:
            The registry itself, for chaining.

        Raises:
            InvalidRegistration: If ``provider`` is not callable, or needs arguments
                other than the registry.
        """
        wrapped = Provider.of(key, provider)
        with self._lock:
            if self._is_registered(key):
                logger.debug("Ignoring provider for already registered key '%s'", key)
            else:
                self._providers[key] = wrapped
                self._registration_order.append(key)
        return self

    def publish(self, key: str, value: Any) -> "Registry":
        """Register a ready value for ``key`` unless the key is already registered.

        Returns:
            The registry itself, for chaining.
        """
        with self._lock:
            if self._is_registered(key):
                logger.debug("Ignoring value for already registered key '%s'", key)
            else:
                self._values[key] = value
                self._registration_order.append(key)
        return self

    def get(self, key: str) -> Any:
        """Return the value for ``key``, running its provider on first use.

        Post-construct hooks registered for ``key`` run once, after the provider
        and before the value is returned.

        Raises:
            NotFound: If nothing was provided or published under ``key``.
            CircularDependency: If resolving ``key`` requires ``key`` itself.
        """
        with self._lock:
            if key in self._values:
                return self._values[key]
            if key not in self._providers:
                raise NotFound(key)
            return self._resolve(self._providers[key])

    def post_construct(self, key: str, hook: Callable[[Any, "Registry"], Any]) -> None:
        """Register a hook to be called with ``(value, registry)`` when ``key`` resolves.

        Hooks run in the order they were registered. The key does not need to be
        registered yet; a hook added after the key has resolved never runs.

        Raises:
            InvalidRegistration: If ``hook`` is not callable.
        """
        if not callable(hook):
            raise InvalidRegistration(f"post construct hook for '{key}' must be callable")
        with self._lock:
            if key in self._values:
                logger.debug("Key '%s' is already resolved, hook will not run", key)
            else:
                self._post_construct_hooks[key].append(hook)

    def provides(self, name: Optional[str] = None) -> Callable:
        """Decorator to register a function as a provider.

        Args:
            name: Optional key to register under; defaults to the class name, or the
                function name with any 'make_' prefix removed.

        Returns:
            A decorator that registers the function and returns it unchanged.

        Example:
            @registry.provides()
            def make_mailer(registry) -> Mailer:
                return Mailer(registry.get("smtp.host"))
        """

        def decorator(func: Callable) -> Callable:
            if not (inspect.isfunction(func) or inspect.isclass(func)):
                raise InvalidRegistration(f"{func!r} is not a class or function")
            self.provide(name or inferred_name(func), func)
            return func

        return decorator

    def state_of(self, key: str) -> EntryState:
        with self._lock:
            if key in self._values:
                return EntryState.RESOLVED
            if key in self._providers:
                return EntryState.PROVIDED
            return EntryState.UNREGISTERED

    def keys(self) -> list[str]:
        """Return every registered key in registration order."""
        with self._lock:
            return list(self._registration_order)

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return self._is_registered(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return f"Registry(environment={self.environment!r}, keys={self.keys()!r})"

    def _is_registered(self, key: str) -> bool:
        return key in self._values or key in self._providers

    def _resolve(self, provider: Provider) -> Any:
        key = provider.key
        if key in self._resolving:
            raise CircularDependency(self._cycle_through(key))

        self._resolving[key] = None
        try:
            logger.debug("Resolving '%s'", key)
            value = self._values[key] = provider.invoke(self)
            del self._providers[key]
            # Taken before running, so hooks added by a hook are inert
            hooks = self._post_construct_hooks.pop(key, [])
            for hook in hooks:
                hook(value, self)
        finally:
            del self._resolving[key]

        return value

    def _cycle_through(self, key: str) -> list[str]:
        """The keys on the resolution stack from the first occurrence of ``key``, then ``key``."""
        in_progress = list(self._resolving)
        return in_progress[in_progress.index(key):] + [key]

    def _load(self, loader: "ScriptLoader") -> None:
        if self.environment is not None:
            self._run_scripts(loader, ENVIRONMENT_SCRIPT.format(environment=self.environment))
        self._run_scripts(loader, DEFAULT_SCRIPT)

    def _run_scripts(self, loader: "ScriptLoader", relative_path: str) -> None:
        for path in loader.list_files(relative_path):
            logger.info("Running registration script %s", path)
            register = loader.load(path)
            register(self)
