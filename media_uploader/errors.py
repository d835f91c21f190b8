"""Error taxonomy for batch media uploads."""
from typing import Any, Optional


class UploaderError(Exception):
    """Base class for all media_uploader errors."""


class ConfigurationError(UploaderError):
    """Raised when mandatory configuration is missing or invalid."""


class ValidationError(UploaderError):
    """A candidate file was rejected before any I/O."""

    def __init__(self, filename: str, reason: str):
        super().__init__(f"{filename}: {reason}")
        self.filename = filename
        self.reason = reason


class APIError(UploaderError):
    """The backend API answered with an error status."""

    def __init__(self, message: str, status_code: int, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class CredentialError(UploaderError):
    """The backend did not issue an upload target."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransferError(UploaderError):
    """The direct write to object storage did not succeed."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class CompressionError(UploaderError):
    """Compression failed. Always swallowed by the compression stage."""


class EntryNotFoundError(UploaderError, KeyError):
    """No resolved entry exists for the given key."""

    def __str__(self) -> str:
        return Exception.__str__(self)
