# src/services/errors.py
from typing import Optional


class PlatformError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PlatformError):
    """Missing or invalid request fields"""

    status_code = 400


class NotFoundError(PlatformError):
    """Dataset or experiment absent, or not owned by the caller"""

    status_code = 404


class StorageError(PlatformError):
    """Persistence layer failure"""

    status_code = 500


class MLServiceError(PlatformError):
    """Failure while calling the remote ML service.

    Keeps the remote HTTP status when there was one; network-level failures
    use 500.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code or 500
