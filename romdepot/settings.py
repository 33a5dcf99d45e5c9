"""Application settings for ROM Depot."""
from __future__ import annotations

import json
import logging
import os
from copy import deepcopy
from typing import Any, Dict, Optional

from .models import UploadConstraint
from .shared_config import (
    ALLOWED_EXTENSIONS,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_SETTINGS_PATH,
    LOGS_DIR,
    MAX_UPLOAD_BYTES,
    UPLOAD_DIR,
)

logger = logging.getLogger("romdepot")

DEFAULT_SETTINGS: Dict[str, Any] = {
    "host": DEFAULT_HOST,
    "port": DEFAULT_PORT,
    "upload_dir": UPLOAD_DIR,
    "logs_dir": LOGS_DIR,
    "max_upload_bytes": MAX_UPLOAD_BYTES,
    "allowed_extensions": list(ALLOWED_EXTENSIONS),
}

# env var -> (settings key, converter)
ENV_OVERRIDES = (
    ("ROMDEPOT_HOST", "host", str),
    ("PORT", "port", int),
    ("ROMDEPOT_PORT", "port", int),
    ("ROMDEPOT_UPLOAD_DIR", "upload_dir", str),
    ("ROMDEPOT_LOGS_DIR", "logs_dir", str),
    ("ROMDEPOT_MAX_UPLOAD_BYTES", "max_upload_bytes", int),
)


def _deep_merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    out = deepcopy(base)
    for k, v in (updates or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = deepcopy(v)
    return out


def _apply_env(settings: Dict[str, Any], environ) -> Dict[str, Any]:
    for var, key, convert in ENV_OVERRIDES:
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            settings[key] = convert(raw)
        except ValueError:
            logger.warning("Ignoring invalid value for %s: %r", var, raw)
    return settings


def load_settings(path: Optional[str] = DEFAULT_SETTINGS_PATH, environ=None) -> Dict[str, Any]:
    """Defaults, then the JSON file at ``path`` (if any), then environment overrides."""
    environ = os.environ if environ is None else environ
    settings = deepcopy(DEFAULT_SETTINGS)
    if path and os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                settings = _deep_merge(settings, data)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read settings file %s: %s", path, e)
    return _apply_env(settings, environ)


def merge_settings(base: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return _deep_merge(base, overrides or {})


def build_upload_constraint(settings: Dict[str, Any]) -> UploadConstraint:
    exts = settings.get("allowed_extensions") or ALLOWED_EXTENSIONS
    normalized = frozenset(
        (e if e.startswith(".") else f".{e}").lower() for e in exts if e
    )
    return UploadConstraint(
        allowed_extensions=normalized,
        max_size_bytes=int(settings.get("max_upload_bytes", MAX_UPLOAD_BYTES)),
    )
