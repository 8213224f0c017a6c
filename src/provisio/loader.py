"""Discovery and loading of registration scripts.

A registration script is a Python file defining a module-level ``register`` function
which receives the registry under construction::

    # deps/default.py
    def register(registry):
        registry.provide("app.db", lambda r: Database(r.get("app.db.url")))
        registry.publish("app.db.url", "sqlite:///app.db")

Scripts found under several search paths all run, in search path order.
"""

import importlib.util
import logging
import sys
import uuid
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Protocol, Sequence, Union

from provisio.errors import RegistrationScriptError

__all__ = ["ScriptLoader", "FileSystemLoader", "StaticLoader"]

logger = logging.getLogger(__name__)

RegisterFunction = Callable[[Any], Any]


class ScriptLoader(Protocol):
    """Finds registration scripts and turns them into registration callables."""

    def list_files(self, relative_path: str) -> Sequence[str]:
        """Return the scripts matching ``relative_path``, in execution order."""
        ...

    def load(self, path: str) -> RegisterFunction:
        """Return the callable that applies the script at ``path`` to a registry."""
        ...


class FileSystemLoader:
    """Load registration scripts from a list of directories.

    Args:
        search_paths: Directories searched, in order, for each relative script path.
    """

    def __init__(self, search_paths: Iterable[Union[str, Path]]):
        self.search_paths = [Path(p).expanduser().resolve() for p in search_paths]

    def list_files(self, relative_path: str) -> list[str]:
        files = []
        for search_path in self.search_paths:
            candidate = search_path / relative_path
            if candidate.is_file():
                files.append(str(candidate))
        logger.debug("Found %d script(s) for %s", len(files), relative_path)
        return files

    def load(self, path: str) -> RegisterFunction:
        """Import the script at ``path`` and return its ``register`` function.

        Raises:
            RegistrationScriptError: If the file cannot be imported, or does not define
                a callable ``register``.
        """
        module_name = f"_provisio_script_{uuid.uuid4().hex}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise RegistrationScriptError(path, "not a loadable Python file")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            del sys.modules[module_name]
            raise RegistrationScriptError(path, str(e)) from e

        register = getattr(module, "register", None)
        if not callable(register):
            del sys.modules[module_name]
            raise RegistrationScriptError(path, "no callable 'register' defined")
        return register


class StaticLoader:
    """Serve registration functions held in memory, keyed by relative script path.

    Example:
        >>> loader = StaticLoader({
        ...     "deps/default.py": [register_database, register_mailer],
        ...     "deps/test/default.py": [register_fake_mailer],
        ... })
        >>> registry = Registry(loader, environment="test")
    """

    def __init__(self, scripts: Mapping[str, Sequence[RegisterFunction]]):
        self._scripts = {path: list(functions) for path, functions in scripts.items()}

    def list_files(self, relative_path: str) -> list[str]:
        return [
            f"{relative_path}#{index}"
            for index in range(len(self._scripts.get(relative_path, [])))
        ]

    def load(self, path: str) -> RegisterFunction:
        relative_path, _, index = path.rpartition("#")
        try:
            return self._scripts[relative_path][int(index)]
        except (KeyError, IndexError, ValueError):
            raise RegistrationScriptError(path, "no such script") from None
