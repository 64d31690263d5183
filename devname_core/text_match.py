"""
text_match.py - Text Helpers

Provides name joining, whitespace collapsing and comparison normalization
"""

from typing import Iterable, Optional
import re

NAME_SEPARATOR = " - "

_MULTI_SPACE = re.compile(r"\s{2,}")
_ANY_SPACE = re.compile(r"\s+")


def join_parts(parts: Iterable[Optional[str]], separator: str = NAME_SEPARATOR) -> str:
    """
    Join trimmed non-empty parts

    Args:
        parts: Candidate parts (None and blank parts are dropped)
        separator: Separator string

    Returns:
        Joined text
    """
    kept = []
    for part in parts:
        if part is None:
            continue
        part = str(part).strip()
        if part:
            kept.append(part)
    return separator.join(kept)


def collapse_whitespace(text: str) -> str:
    """
    Collapse runs of two or more whitespace characters into one space

    Args:
        text: Original text

    Returns:
        Collapsed and trimmed text
    """
    return _MULTI_SPACE.sub(" ", text).strip()


def normalize_name(name: str) -> str:
    """Normalize a name for comparison"""
    return _ANY_SPACE.sub(" ", name).strip()


def sql_quote(text: str) -> str:
    """Quote a string as a SQL literal"""
    return "'" + text.replace("'", "''") + "'"
