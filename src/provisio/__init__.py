"""Provisio lazy dependency registry.

Provisio is a small registry of named, lazily constructed singletons. Application
bootstrap code registers providers (callables producing a value) or published
values under string keys, and the rest of the application asks for them by key.
Each provider runs at most once, on first use, and its result is cached.

Key Features:
    - First registration wins, so environment specific scripts override defaults
    - Providers may receive the registry to resolve their own dependencies
    - Post-construct hooks run once, right after a value is built
    - Dependency loops are reported with the full key path
    - Safe to share between threads

Basic Usage:
    >>> from provisio import Registry
    >>>
    >>> registry = Registry()
    >>> registry.provide("app.db", lambda r: Database(r.get("app.db.url"))) \\
    ...     .publish("app.db.url", "sqlite:///app.db")
    >>> db = registry.get("app.db")

The package consists of several modules:
    - registry: The Registry and its resolution algorithm
    - loader: Discovery and loading of registration scripts
    - config: Script search paths and environment selection
    - builders: Building a registry from configuration
    - domain: Core domain models (EntryState, Provider)
    - errors: Package-specific exceptions
"""

from provisio.builders import make_registry
from provisio.config import RegistryConfig
from provisio.domain import EntryState
from provisio.errors import (
    CircularDependency,
    DependencyError,
    InvalidRegistration,
    NotFound,
    RegistrationScriptError,
)
from provisio.loader import FileSystemLoader, ScriptLoader, StaticLoader
from provisio.registry import Registry

__all__ = [
    "Registry",
    "EntryState",
    "make_registry",
    "RegistryConfig",
    "ScriptLoader",
    "FileSystemLoader",
    "StaticLoader",
    "DependencyError",
    "InvalidRegistration",
    "NotFound",
    "CircularDependency",
    "RegistrationScriptError",
]
