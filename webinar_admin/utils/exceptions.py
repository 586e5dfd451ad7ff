"""Custom exception classes."""


class EventNotFoundError(Exception):
    """Raised when event ID doesn't exist."""
    pass


class DocumentNotFoundError(Exception):
    """Raised when a document id does not exist in its collection."""
    pass


class ValidationError(Exception):
    """Raised when form data fails validation."""
    pass


class StorageError(Exception):
    """Raised when the document store or object storage cannot be written."""
    pass


class AuthenticationError(Exception):
    """Raised when sign-in credentials are invalid."""
    pass


class ConfigurationError(Exception):
    """Raised when an environment setting is present but unusable."""
    pass
