"""
Upload allow-list and size checks.
"""

import logging
from typing import Optional

from .errors import FileTooLargeError, InvalidFileTypeError
from .models import UploadConstraint
from .naming import stored_extension
from .shared_config import ALLOWED_EXTENSIONS, MAX_UPLOAD_BYTES
from .utils import format_size

logger = logging.getLogger("romdepot")

INVALID_TYPE_MESSAGE = 'Invalid file type. Only ROM files are allowed.'

DEFAULT_CONSTRAINT = UploadConstraint(
    allowed_extensions=frozenset(ALLOWED_EXTENSIONS),
    max_size_bytes=MAX_UPLOAD_BYTES,
)


class UploadFilter:
    """Checks an incoming file before any of its bytes are kept."""

    def __init__(self, constraint: Optional[UploadConstraint] = None):
        self.constraint = constraint or DEFAULT_CONSTRAINT

    @property
    def max_size_bytes(self) -> int:
        return self.constraint.max_size_bytes

    def accept(self, original_name: str) -> bool:
        ext = stored_extension(original_name)
        return bool(ext) and ext in self.constraint.allowed_extensions

    def check(self, original_name: str) -> None:
        if not self.accept(original_name):
            logger.info("Rejected upload %r: extension not allowed", original_name)
            raise InvalidFileTypeError(INVALID_TYPE_MESSAGE)

    def check_size(self, size_bytes: int) -> None:
        limit = self.constraint.max_size_bytes
        if size_bytes > limit:
            raise FileTooLargeError(
                f'File too large. Maximum size is {format_size(limit)}.'
            )
