"""Custom exceptions for link service operations."""


class LinkServiceError(Exception):
    """Base exception for link service errors."""

    pass


class ConfigurationError(LinkServiceError):
    """Raised when link types or styles are misconfigured."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class InvalidInputError(LinkServiceError):
    """Raised when an operation receives an object it cannot work with."""

    pass


class ValidationError(LinkServiceError):
    """Raised when a link fails validation before it is persisted."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(LinkServiceError):
    """Raised when a link is not found."""

    def __init__(self, resource_type: str, resource_id: str):
        message = f"{resource_type} with ID '{resource_id}' not found"
        super().__init__(message)
        self.resource_type = resource_type
        self.resource_id = resource_id


class DatabaseError(LinkServiceError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error
