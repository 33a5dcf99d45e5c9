"""Error types for ROM Depot.

Services raise these and stay HTTP-agnostic; the web layer maps them to a
``{"success": false, "error": ...}`` response using ``status_code``.
"""

from __future__ import annotations


class RomDepotError(Exception):
    """Base class for every error the service reports to a client."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(RomDepotError):
    """Client sent something we cannot act on."""

    status_code = 400


class MissingFieldError(ValidationError):
    """Raised when a required request field is absent or empty."""


class MissingFileError(ValidationError):
    """Raised when an upload request carries no file."""


class InvalidFileTypeError(ValidationError):
    """Raised when an upload's extension is not on the allow-list."""


class InvalidFilenameError(ValidationError):
    """Raised when a stored filename would resolve outside the upload directory."""


class FileTooLargeError(RomDepotError):
    """Raised when an upload exceeds the configured byte limit."""

    status_code = 413


class NotFoundError(RomDepotError):
    status_code = 404


class InternalError(RomDepotError):
    """Unexpected I/O or permission failure."""

    status_code = 500
