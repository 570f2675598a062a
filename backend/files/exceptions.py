"""
Upload errors.

Each exception carries the ErrorKey the API sends back to clients.
"""

from typing import Optional

from commons.errors import ErrorKey


class UploadError(Exception):
    """Base class for upload failures."""

    error_key = ErrorKey.VALIDATION

    def __init__(self, message: str = '', error_key: Optional[ErrorKey] = None):
        super().__init__(message or str(error_key or self.error_key))
        if error_key is not None:
            self.error_key = error_key


class InvalidInput(UploadError, ValueError):
    """Missing or malformed upload/identity descriptor."""


class FileTooLarge(InvalidInput):
    error_key = ErrorKey.FILE_TOO_BIG


class ProcessingError(UploadError):
    """Image transcoding failed, nothing was stored."""

    error_key = ErrorKey.WRONG_FILE_TYPE
