"""Stored filename generation."""

from __future__ import annotations

import os
import random
import time

from werkzeug.utils import secure_filename

RANDOM_UPPER_BOUND = 10 ** 9


def stored_extension(original_name: str) -> str:
    """Lower-cased extension of ``original_name``, or '' if it has none worth keeping."""
    base = os.path.basename((original_name or "").replace("\\", "/"))
    # only the suffix goes through secure_filename so non-ASCII stems keep their extension
    suffix = secure_filename(os.path.splitext(base)[1])
    return f".{suffix.lower()}" if suffix else ""


def generate_stored_filename(original_name: str) -> str:
    """Return ``<epoch-ms>-<random><ext>`` for an uploaded file."""
    millis = int(time.time() * 1000)
    return f"{millis}-{random.randint(0, RANDOM_UPPER_BOUND)}{stored_extension(original_name)}"
