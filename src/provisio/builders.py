from typing import Optional

from provisio.config import RegistryConfig
from provisio.loader import FileSystemLoader, ScriptLoader
from provisio.registry import Registry


def make_registry(
    config: Optional[RegistryConfig] = None,
    loader: Optional[ScriptLoader] = None,
) -> Registry:
    """
    Construct a registry populated by the registration scripts a configuration names.

    Environment specific scripts run before the default ones, so that their
    registrations take priority.

    Args:
        config: Where to find scripts and which environment to load; read from the
            process environment when not given.
        loader: An optional loader to use instead of searching ``config.search_paths``
            on the file system.

    Returns:
        A registry with every script's registrations applied. Nothing is resolved yet.

    Raises:
        RegistrationScriptError: If a discovered script cannot be loaded.
    """
    if config is None:
        config = RegistryConfig.from_env()
    if loader is None:
        loader = FileSystemLoader(config.search_paths)
    return Registry(loader, config.environment)
