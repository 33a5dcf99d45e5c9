"""
Upload handling: filter, name, stream to disk, identify.
"""

import logging
import os
import uuid
from typing import Dict, Optional, Tuple

from werkzeug.datastructures import FileStorage

from . import upload_index
from .errors import FileTooLargeError, InternalError, MissingFileError
from .identifier import identify_rom
from .monitor import monitor_action
from .naming import generate_stored_filename
from .shared_config import COPY_CHUNK_SIZE, TEMP_PREFIX
from .storage import StoragePathResolver
from .upload_filter import UploadFilter
from .utils import format_size

logger = logging.getLogger("romdepot")


def safe_unlink(path: str) -> None:
    """Best-effort file removal (no exception if it fails)."""
    try:
        os.remove(path)
    except OSError:
        pass


class UploadHandler:
    """Completes a single-file ROM upload."""

    def __init__(self, resolver: StoragePathResolver, upload_filter: Optional[UploadFilter] = None,
                 chunk_size: int = COPY_CHUNK_SIZE):
        self.resolver = resolver
        self.filter = upload_filter or UploadFilter()
        self.chunk_size = chunk_size

    def _stream_to_temp(self, file: FileStorage) -> Tuple[str, int]:
        """
        Copy the upload into a temp file inside the upload directory.

        The copy stops as soon as the byte limit is passed; the partial temp
        file is removed before the error propagates.
        """
        tmp_path = os.path.join(self.resolver.root, f"{TEMP_PREFIX}{uuid.uuid4().hex}")
        limit = self.filter.max_size_bytes
        written = 0
        try:
            with open(tmp_path, 'wb') as out:
                while True:
                    chunk = file.stream.read(self.chunk_size)
                    if not chunk:
                        break
                    written += len(chunk)
                    self.filter.check_size(written)
                    out.write(chunk)
        except Exception:
            safe_unlink(tmp_path)
            raise
        logger.debug("Streamed %d bytes (limit %d) to %s", written, limit, tmp_path)
        return tmp_path, written

    def handle(self, file: Optional[FileStorage]) -> Dict:
        """
        Store one uploaded ROM and describe it.

        Returns:
            ``{success, filename, originalName, gameName, system, size}``
        """
        if file is None or not file.filename:
            raise MissingFileError('No file uploaded')

        original_name = file.filename
        self.filter.check(original_name)
        if file.content_length:
            # declared per-part length lets us refuse before reading anything
            self.filter.check_size(file.content_length)

        stored_name = generate_stored_filename(original_name)
        dest = self.resolver.resolve(stored_name)

        try:
            self.resolver.ensure_directory()
            tmp_path, size = self._stream_to_temp(file)
            try:
                os.replace(tmp_path, dest)
            except OSError:
                safe_unlink(tmp_path)
                raise
        except FileTooLargeError:
            logger.info("Rejected upload %r: larger than %s",
                        original_name, format_size(self.filter.max_size_bytes))
            raise
        except OSError as e:
            logger.error("Failed storing upload %r: %s", original_name, e)
            raise InternalError(f'Could not store file: {e.strerror or e}')

        try:
            upload_index.record_upload(
                self.resolver.root,
                stored_name=stored_name,
                original_name=original_name,
                size_bytes=size,
            )
        except OSError as e:
            logger.warning("Could not record original name for %s: %s", stored_name, e)

        rom = identify_rom(original_name)
        monitor_action(f"upload stored: {original_name} -> {stored_name} ({format_size(size)})")

        return {
            'success': True,
            'filename': stored_name,
            'originalName': original_name,
            'gameName': rom.display_name,
            'system': rom.system,
            'size': size,
        }
