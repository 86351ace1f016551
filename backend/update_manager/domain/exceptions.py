"""Domain-level exception hierarchy."""


class DomainError(Exception):
    """Base exception for service-layer errors."""

    def __init__(self, message: str = "Domain error") -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """Raised when a requested resource cannot be located."""


class ConflictError(DomainError):
    """Raised when a unique constraint or business rule is violated."""


class ValidationError(DomainError):
    """Raised when input fails validation rules."""


class UnknownRequestTypeError(ValidationError):
    """Raised when an agent request carries an unrecognised ``type``."""

    def __init__(self, request_type: object = None) -> None:
        super().__init__("Invalid request type")
        self.request_type = request_type


class UnauthorizedError(DomainError):
    """Raised when authentication credentials are invalid."""


class StorageError(DomainError):
    """Raised when the backing store fails during a primary write or lookup.

    ``reference`` ties the client-facing response to the server-side log entry.
    """

    def __init__(self, message: str = "Internal server error", reference: str = "") -> None:
        super().__init__(message)
        self.reference = reference
