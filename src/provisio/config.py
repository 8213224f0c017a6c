"""Configuration for building registries from registration scripts."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

__all__ = ["RegistryConfig", "PATH_VARIABLE", "ENVIRONMENT_VARIABLE"]

PATH_VARIABLE = "PROVISIO_PATH"
ENVIRONMENT_VARIABLE = "PROVISIO_ENV"


@dataclass
class RegistryConfig:
    """Where registration scripts live and which environment to load."""

    # Directories searched for deps/ scripts, in priority order
    search_paths: list[Path] = field(default_factory=lambda: [Path.cwd()])

    # Environment whose scripts run before the defaults
    environment: str | None = None

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> RegistryConfig:
        """Load configuration from environment variables.

        Args:
            environ: Mapping to read from (``os.environ`` if not provided)

        Returns:
            RegistryConfig instance
        """
        if environ is None:
            environ = dict(os.environ)

        raw_paths = environ.get(PATH_VARIABLE, "")
        search_paths = [Path(p) for p in raw_paths.split(os.pathsep) if p.strip()]

        return cls(
            search_paths=search_paths or [Path.cwd()],
            environment=environ.get(ENVIRONMENT_VARIABLE) or None,
        )
