"""Best-effort ROM identification from a filename.

No ROM headers are parsed. A name is matched against a small table of known
filenames; anything else gets a display name built from the filename itself.
"""

from __future__ import annotations

import os
import re
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from .models import KnownRomEntry, RomInfo

UNKNOWN_SYSTEM = "Unknown"
FALLBACK_NAME = "Unknown ROM"

_SEPARATOR_RUN_RE = re.compile(r"[-_]+")


def _build_table(entries: Iterable[KnownRomEntry]) -> Mapping[str, RomInfo]:
    table = {}
    for entry in entries:
        if entry.key in table:
            raise ValueError(f"duplicate known ROM key: {entry.key}")
        table[entry.key] = entry.info
    return MappingProxyType(table)


# Declaration order is the match order: the first key that matches wins.
KNOWN_ROMS: Mapping[str, RomInfo] = _build_table([
    KnownRomEntry("super-mario-bros.nes", RomInfo("Super Mario Bros", "NES")),
    KnownRomEntry("zelda.nes", RomInfo("The Legend of Zelda", "NES")),
    KnownRomEntry("pokemon-red.gb", RomInfo("Pokemon Red", "Game Boy")),
])


def _match_keys(table: Mapping[str, RomInfo]):
    # (stem, info) pairs; a key without an extension matches on the whole key
    for key, info in table.items():
        stem = os.path.splitext(key)[0].lower()
        if stem:
            yield stem, info


def format_display_name(filename: str) -> str:
    """``unknown_game_123.nes`` -> ``Unknown Game 123``."""
    base = os.path.basename((filename or "").replace("\\", "/"))
    stem = os.path.splitext(base)[0]
    spaced = _SEPARATOR_RUN_RE.sub(" ", stem)
    words = [w[:1].upper() + w[1:] for w in spaced.split()]
    return " ".join(words)


def identify_rom(filename: Optional[str], table: Mapping[str, RomInfo] = KNOWN_ROMS) -> RomInfo:
    """Identify ``filename`` by substring match against ``table``.

    Never raises; unknown names come back with system ``Unknown``.
    """
    name = filename if isinstance(filename, str) else ""
    lowered = name.lower()
    for stem, info in _match_keys(table):
        if stem in lowered:
            return info

    display = format_display_name(name) or name.strip() or FALLBACK_NAME
    return RomInfo(display_name=display, system=UNKNOWN_SYSTEM)
