"""
safety_checks.py - Safety Check Module

Provides checks on the registry database file before it is modified
"""

from pathlib import Path
from typing import List, Optional, Tuple
import os

LOCK_SUFFIXES = ("-journal", "-wal")


def check_writable(path: Path) -> Tuple[bool, Optional[str]]:
    """
    Check if path is writable

    Args:
        path: Path to check

    Returns:
        (is_writable, error_reason)
    """
    if path.exists():
        if not os.access(path, os.W_OK):
            return False, f"File is not writable: {path}"
    else:
        parent = path.parent
        if not parent.exists():
            return False, f"Parent directory does not exist: {parent}"
        if not os.access(parent, os.W_OK):
            return False, f"Directory is not writable: {parent}"

    return True, None


def check_database_file(path: Path) -> Tuple[bool, Optional[str]]:
    """
    Check that the database exists and can be modified

    Args:
        path: Database file

    Returns:
        (is_usable, error_reason)
    """
    if not path.exists():
        return False, f"Database does not exist: {path}"
    if not path.is_file():
        return False, f"Database path is not a file: {path}"

    valid, error = check_writable(path)
    if not valid:
        return False, error

    # SQLite writes its journal next to the database
    valid, error = check_writable(path.parent / (path.name + "-journal"))
    if not valid:
        return False, error

    return True, None


def check_lock_files(path: Path) -> List[str]:
    """
    Look for side files left by another writer

    Args:
        path: Database file

    Returns:
        Warning list
    """
    warnings = []
    for suffix in LOCK_SUFFIXES:
        side = path.parent / (path.name + suffix)
        if side.exists():
            warnings.append(f"{side.name} exists: another process may be writing to the database")
    return warnings


def check_store_ready(path: Path) -> Tuple[List[str], List[str]]:
    """
    All checks before a rename batch

    Args:
        path: Database file

    Returns:
        (errors, warnings)
    """
    path = Path(path)
    errors = []
    valid, error = check_database_file(path)
    if not valid:
        errors.append(error)
    return errors, check_lock_files(path)
