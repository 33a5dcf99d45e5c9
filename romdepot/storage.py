"""
Path resolution for the flat upload directory.
"""

import os

from werkzeug.security import safe_join
from werkzeug.utils import secure_filename

from .errors import InvalidFilenameError


class StoragePathResolver:
    """Maps stored filenames to paths directly inside one upload directory."""

    def __init__(self, root: str):
        self.root = os.path.abspath(root)

    def exists(self) -> bool:
        return os.path.isdir(self.root)

    def ensure_directory(self) -> str:
        """Create the upload directory if it is missing. Safe to call repeatedly."""
        os.makedirs(self.root, exist_ok=True)
        return self.root

    def resolve(self, filename: str) -> str:
        """
        Join ``filename`` with the upload root.

        Only names that ``secure_filename`` leaves untouched are accepted, so
        separators, parent references, NUL bytes and dot-files are all refused.

        Raises:
            InvalidFilenameError: if the name is not a plain filename or
                would land anywhere other than directly inside the root.
        """
        if not isinstance(filename, str) or not filename:
            raise InvalidFilenameError('Invalid filename')
        if secure_filename(filename) != filename:
            raise InvalidFilenameError('Invalid filename')

        path = safe_join(self.root, filename)
        if path is None:
            raise InvalidFilenameError('Invalid filename')

        # a symlink inside the root must not point back out of it
        parent = os.path.dirname(os.path.realpath(path))
        if os.path.normcase(parent) != os.path.normcase(os.path.realpath(self.root)):
            raise InvalidFilenameError('Invalid filename')
        return path

    def listdir(self):
        """Entry names in the root, sorted; empty when the root does not exist."""
        if not self.exists():
            return []
        try:
            return sorted(os.listdir(self.root))
        except FileNotFoundError:
            return []
