"""Domain-specific exceptions for clean error handling."""


class ConfigurationError(RuntimeError):
    """Raised when runtime configuration is invalid or missing."""


class StorageError(RuntimeError):
    """Raised when a persistence operation fails for a non-domain reason."""


class NotFoundError(LookupError):
    """Raised when a lookup by id matches no row."""

    def __init__(self, resource: str, identifier: object) -> None:
        super().__init__(f"{resource} with ID {identifier} does not exist")
        self.resource = resource
        self.identifier = identifier


class DuplicateEmailError(ValueError):
    """Raised when the unique e-mail constraint on surveys is violated."""

    def __init__(self, email: str = "") -> None:
        super().__init__("A survey with this email already exists")
        self.email = email


class ValidationError(ValueError):
    """Raised when domain-level validation fails."""
