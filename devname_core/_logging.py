"""
_logging.py - Logging Setup

Core modules log through get_logger(); only the CLI calls setup_logging().
Console output meant for people stays print-based in the CLI.
"""

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Union

ROOT_LOGGER = "devname"
LEVEL_ENV = "DEVNAME_LOG_LEVEL"

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Handlers installed by the last setup_logging() call
_installed: List[logging.Handler] = []


def get_logger(name: str) -> logging.Logger:
    """Module logger under the devname namespace"""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def _level_from_env() -> int:
    name = os.environ.get(LEVEL_ENV, "").strip().upper()
    level = logging.getLevelName(name) if name else None
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(level: Optional[int] = None, log_file: Union[str, Path, None] = None) -> None:
    """
    Configure the devname logger

    Replaces the handlers of any previous call.

    Args:
        level: Console level (None reads DEVNAME_LOG_LEVEL, default WARNING)
        log_file: Optional file that also receives INFO records
    """
    root = logging.getLogger(ROOT_LOGGER)
    for handler in _installed:
        root.removeHandler(handler)
        handler.close()
    _installed.clear()

    console_level = level if level is not None else _level_from_env()
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    _installed.append(console)

    logger_level = console_level
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(min(console_level, logging.INFO))
        _installed.append(file_handler)
        logger_level = min(console_level, logging.INFO)

    formatter = logging.Formatter(_FORMAT)
    for handler in _installed:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(logger_level)
