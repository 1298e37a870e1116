"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when an operation targets an id absent from the active store."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when input is rejected before touching any store."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class StorageError(ApplicationError):
    """Raised when the local store cannot persist a collection."""

    def __init__(self, message: str = "Local storage error") -> None:
        super().__init__(message, code="SYS_STORAGE_ERROR")


class RemoteFailure(ApplicationError):
    """
    Raised when a remote API call fails.

    Carries the HTTP status code when the server answered, or None when the
    request never got a response (connection refused, timeout, DNS).
    """

    def __init__(
        self,
        message: str = "Remote service error",
        status_code: int | None = None,
        cause: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.cause = cause
        super().__init__(message, code="SYS_REMOTE_FAILURE")

    @property
    def is_transport_error(self) -> bool:
        """True when no HTTP response was received."""
        return self.status_code is None

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code == 401

    @property
    def retryable(self) -> bool:
        """Transport errors, throttling and server errors may succeed on retry."""
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500
