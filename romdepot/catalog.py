"""
Catalog of stored ROMs, derived from the upload directory on every call.
"""

import logging
import os
from typing import List

from . import upload_index
from .errors import InternalError, NotFoundError
from .identifier import identify_rom
from .models import CatalogEntry, StoredFile
from .storage import StoragePathResolver
from .utils import to_base64_text

logger = logging.getLogger("romdepot")

ROM_NOT_FOUND = 'ROM not found'
ROM_FILE_NOT_FOUND = 'ROM file not found'


def _is_internal(name: str) -> bool:
    # in-flight uploads, the index and its temp file are all dot-files
    return name.startswith('.')


class CatalogService:
    """List, inspect, load and delete stored ROMs."""

    def __init__(self, resolver: StoragePathResolver):
        self.resolver = resolver

    def _entry(self, name: str, path: str, original: str) -> CatalogEntry:
        stored = StoredFile(
            stored_filename=name,
            original_filename=original,
            size_bytes=os.stat(path).st_size,
        )
        return CatalogEntry(stored=stored, rom=identify_rom(original))

    def list_roms(self) -> List[CatalogEntry]:
        """Every stored ROM, sorted by stored name. Empty if the directory is missing."""
        names = self.resolver.listdir()
        if not names:
            return []

        originals = upload_index.original_names(self.resolver.root)
        entries = []
        for name in names:
            if _is_internal(name):
                continue
            path = os.path.join(self.resolver.root, name)
            if not os.path.isfile(path):
                continue
            try:
                entries.append(self._entry(name, path, originals.get(name, name)))
            except FileNotFoundError:
                # deleted between listdir and stat
                continue

        if set(originals) - set(names):
            self._prune_index()
        return entries

    def _prune_index(self) -> None:
        try:
            dropped = upload_index.prune(self.resolver.root)
        except OSError as e:
            logger.warning("Could not prune upload index: %s", e)
            return
        if dropped:
            logger.info("Dropped %d upload index entries with no file on disk", dropped)

    def get(self, stored_filename: str) -> CatalogEntry:
        path = self.resolver.resolve(stored_filename)
        if not os.path.isfile(path):
            raise NotFoundError(ROM_NOT_FOUND)
        original = upload_index.lookup_original_name(self.resolver.root, stored_filename)
        try:
            return self._entry(stored_filename, path, original or stored_filename)
        except FileNotFoundError:
            raise NotFoundError(ROM_NOT_FOUND)

    def load(self, stored_filename: str) -> bytes:
        """Full content of a stored ROM."""
        path = self.resolver.resolve(stored_filename)
        try:
            with open(path, 'rb') as f:
                return f.read()
        except (FileNotFoundError, IsADirectoryError):
            raise NotFoundError(ROM_FILE_NOT_FOUND)
        except OSError as e:
            logger.error("Failed reading %s: %s", path, e)
            raise InternalError(f'Could not read ROM file: {e.strerror or e}')

    def load_base64(self, stored_filename: str) -> str:
        return to_base64_text(self.load(stored_filename))

    def delete(self, stored_filename: str) -> None:
        path = self.resolver.resolve(stored_filename)
        if not os.path.isfile(path):
            raise NotFoundError(ROM_NOT_FOUND)
        try:
            os.remove(path)
        except FileNotFoundError:
            # a concurrent delete got there first
            raise NotFoundError(ROM_NOT_FOUND)
        except OSError as e:
            logger.error("Failed deleting %s: %s", path, e)
            raise InternalError(f'Could not delete ROM file: {e.strerror or e}')

        try:
            upload_index.forget(self.resolver.root, stored_filename)
        except OSError as e:
            logger.warning("Could not update upload index after deleting %s: %s", stored_filename, e)
        logger.info("Deleted ROM %s", stored_filename)
