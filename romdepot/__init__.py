"""
ROM Depot - a small HTTP service for uploading, identifying and managing ROM files
"""

__version__ = '1.0.0'
__author__ = 'ROM Depot'

from .models import RomInfo, KnownRomEntry, StoredFile, CatalogEntry, UploadConstraint
from .errors import (
    RomDepotError, ValidationError, MissingFieldError, MissingFileError,
    InvalidFileTypeError, InvalidFilenameError, FileTooLargeError,
    NotFoundError, InternalError,
)
from .storage import StoragePathResolver
from .naming import generate_stored_filename
from .upload_filter import UploadFilter
from .identifier import identify_rom, KNOWN_ROMS
from .catalog import CatalogService
from .utils import format_size


__all__ = [
    'RomInfo',
    'KnownRomEntry',
    'StoredFile',
    'CatalogEntry',
    'UploadConstraint',
    'RomDepotError',
    'ValidationError',
    'MissingFieldError',
    'MissingFileError',
    'InvalidFileTypeError',
    'InvalidFilenameError',
    'FileTooLargeError',
    'NotFoundError',
    'InternalError',
    'StoragePathResolver',
    'generate_stored_filename',
    'UploadFilter',
    'identify_rom',
    'KNOWN_ROMS',
    'CatalogService',
    'format_size',
]
