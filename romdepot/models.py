"""
Data models for ROM Depot
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet


@dataclass(frozen=True)
class RomInfo:
    """Best-effort identification derived from a filename"""
    display_name: str
    system: str = "Unknown"


@dataclass(frozen=True)
class KnownRomEntry:
    """One row of the static identification table"""
    key: str
    info: RomInfo


@dataclass
class StoredFile:
    """A file currently present in the upload directory"""
    stored_filename: str
    original_filename: str
    size_bytes: int = 0


@dataclass
class CatalogEntry:
    """A stored file together with its identification"""
    stored: StoredFile
    rom: RomInfo

    def to_dict(self) -> Dict:
        return {
            'filename': self.stored.stored_filename,
            'originalName': self.stored.original_filename,
            'name': self.rom.display_name,
            'system': self.rom.system,
            'size': self.stored.size_bytes,
        }


@dataclass(frozen=True)
class UploadConstraint:
    """Allow-listed extensions (lower-case, with leading dot) and byte limit"""
    allowed_extensions: FrozenSet[str] = field(default_factory=frozenset)
    max_size_bytes: int = 10 * 1024 * 1024

    def to_dict(self) -> Dict:
        return {
            'allowedExtensions': sorted(self.allowed_extensions),
            'maxUploadBytes': self.max_size_bytes,
        }
