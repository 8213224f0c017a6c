__all__ = [
    "DependencyError",
    "InvalidRegistration",
    "NotFound",
    "CircularDependency",
    "RegistrationScriptError",
]


class DependencyError(Exception):
    """Raised when a dependency cannot be registered or resolved."""

    pass


class InvalidRegistration(DependencyError, TypeError):
    """Raised when a provider or hook cannot be called the way the registry calls it."""

    pass


class NotFound(DependencyError, LookupError):
    """Raised when a key has neither a provider nor a published value."""

    def __init__(self, key: str):
        super().__init__(f"dependency '{key}' not found")
        self.key = key


class CircularDependency(DependencyError):
    """Raised when a provider transitively requests a key that is still being resolved.

    Attributes:
        path: The keys forming the loop, in traversal order, with the repeated key
            at both ends.
    """

    def __init__(self, path: list[str]):
        super().__init__("Dependency loop detected: " + " -> ".join(path))
        self.path = path


class RegistrationScriptError(DependencyError):
    """Raised when a registration script cannot be loaded."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot load registration script {path}: {reason}")
        self.path = path
