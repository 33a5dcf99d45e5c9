"""Runtime logging helpers for ROM Depot."""

from __future__ import annotations

import logging
import sys
import threading
from datetime import date
from pathlib import Path
from typing import Optional

LOGGER_NAME = "romdepot"

_INITIALIZED = False
_SESSION_LOG_DATE: Optional[date] = None
_LOG_PATH: Optional[Path] = None

_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _default_log_path(logs_dir: Optional[str] = None) -> Path:
    from .shared_config import LOGS_DIR

    base = Path(logs_dir or LOGS_DIR)
    base.mkdir(parents=True, exist_ok=True)
    session_day = _SESSION_LOG_DATE or date.today()
    return base / f"runtime-{session_day.isoformat()}.log"


def get_log_path() -> Optional[Path]:
    """Return the active runtime log path, or None before setup."""
    return _LOG_PATH


def setup_runtime_monitor(
    app_name: str = LOGGER_NAME,
    logs_dir: Optional[str] = None,
    echo: bool = True,
) -> logging.Logger:
    """Initialize process-wide logging once; later calls return the same logger."""
    global _INITIALIZED, _SESSION_LOG_DATE, _LOG_PATH
    logger = logging.getLogger(app_name)

    if _INITIALIZED:
        return logger

    logger.setLevel(logging.INFO)
    logger.propagate = False

    if _SESSION_LOG_DATE is None:
        _SESSION_LOG_DATE = date.today()

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    _LOG_PATH = _default_log_path(logs_dir)
    file_handler = logging.FileHandler(_LOG_PATH, encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if echo:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    logger.info("Runtime monitor initialized")
    logger.info("Log file: %s", _LOG_PATH)

    _install_exception_hooks(logger)

    _INITIALIZED = True
    return logger


def _install_exception_hooks(logger: logging.Logger) -> None:
    def _sys_hook(exc_type, exc_value, exc_tb):
        if exc_type and issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        logger.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_tb))

    def _thread_hook(args: threading.ExceptHookArgs):
        thread_name = args.thread.name if args.thread else "<unknown>"
        logger.critical(
            "Unhandled thread exception in %s",
            thread_name,
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )

    sys.excepthook = _sys_hook
    threading.excepthook = _thread_hook


def monitor_action(action: str, *, logger: Optional[logging.Logger] = None) -> None:
    """Emit a real-time action event."""
    (logger or logging.getLogger(LOGGER_NAME)).info("action: %s", action)
