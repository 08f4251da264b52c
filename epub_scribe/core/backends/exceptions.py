"""
Exceptions raised by translation backends.

The translation client treats every ``BackendError`` except
``BackendConfigurationError`` as retryable.
"""
from typing import Optional


class BackendError(Exception):
    """Base exception for translation backend failures."""

    def __init__(self, message: str, backend: Optional[str] = None):
        super().__init__(message)
        self.backend = backend


class BackendTimeoutError(BackendError):
    """Raised when a backend request exceeds its timeout."""
    pass


class BackendHTTPError(BackendError):
    """Raised when a backend answers with a non-2xx status.

    Attributes:
        status_code: HTTP status returned by the backend
        response_text: First 200 characters of the response body
    """
    def __init__(self, message: str, status_code: int, backend: Optional[str] = None,
                 response_text: str = ""):
        super().__init__(message, backend)
        self.status_code = status_code
        self.response_text = response_text


class BackendResponseError(BackendError):
    """Raised when a backend response cannot be decoded."""
    pass


class BackendConfigurationError(BackendError):
    """Raised at construction for unknown backends or missing credentials."""
    pass
