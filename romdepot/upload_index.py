"""Original-name index for stored uploads.

Stored filenames are generated, so the name the user uploaded is kept in a
small JSON file inside the upload directory. The directory listing stays the
source of truth: the index only supplies original names, and a missing or
unreadable index just means stored names are shown instead.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from typing import Any, Dict, Optional

from .shared_config import INDEX_FILENAME

INDEX_VERSION = 1

logger = logging.getLogger("romdepot")

_LOCK = threading.Lock()


def index_path(upload_dir: str) -> str:
    return os.path.join(upload_dir, INDEX_FILENAME)


def _empty() -> Dict[str, Any]:
    return {"version": INDEX_VERSION, "files": {}}


def load_index(upload_dir: str) -> Dict[str, Any]:
    """Load the index JSON (best-effort)."""
    path = index_path(upload_dir)
    if not os.path.exists(path):
        return _empty()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Upload index unreadable, ignoring it: %s", e)
        return _empty()

    if not isinstance(data, dict):
        return _empty()
    if not isinstance(data.get("files"), dict):
        data["files"] = {}
    data.setdefault("version", INDEX_VERSION)
    return data


def save_index(upload_dir: str, data: Dict[str, Any]) -> None:
    """Atomically write the index to disk."""
    os.makedirs(upload_dir, exist_ok=True)

    path = index_path(upload_dir)
    tmp_path = f"{path}.tmp"

    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2, sort_keys=True)

    os.replace(tmp_path, path)


def record_upload(upload_dir: str, *, stored_name: str, original_name: str, size_bytes: int) -> None:
    with _LOCK:
        data = load_index(upload_dir)
        data["files"][stored_name] = {
            "original_name": original_name,
            "size_bytes": int(size_bytes),
            "uploaded_at": time.time(),
        }
        save_index(upload_dir, data)


def forget(upload_dir: str, stored_name: str) -> None:
    with _LOCK:
        data = load_index(upload_dir)
        if data["files"].pop(stored_name, None) is not None:
            save_index(upload_dir, data)


def prune(upload_dir: str) -> int:
    """Drop entries whose file is gone from disk. Returns how many were dropped."""
    with _LOCK:
        data = load_index(upload_dir)
        files = data["files"]
        stale = [name for name in files if not os.path.isfile(os.path.join(upload_dir, name))]
        for name in stale:
            del files[name]
        if stale:
            save_index(upload_dir, data)
        return len(stale)


def original_names(upload_dir: str) -> Dict[str, str]:
    """Map of stored name -> original name for every indexed file."""
    out = {}
    for stored, entry in load_index(upload_dir)["files"].items():
        if isinstance(entry, dict):
            name = entry.get("original_name")
            if isinstance(name, str) and name.strip():
                out[stored] = name.strip()
    return out


def lookup_original_name(upload_dir: str, stored_name: str) -> Optional[str]:
    return original_names(upload_dir).get(stored_name)
