"""
compose_name.py - Name Composition Module

Responsibilities:
- Build a candidate name from location, device name and value label
- Apply the transformation rules
- Reconcile the candidate with the stored name
"""

from typing import List, Optional

from .models_registry import ComposeResult, ComposeStatus, ExternalEntry, ExternalValue, TransformRule
from .rule_set import apply_rules
from .text_match import collapse_whitespace, join_parts, normalize_name

HIDDEN_PREFIX = "$"


def build_candidate(entry: ExternalEntry, value: ExternalValue) -> str:
    """Join location, device name and label, then collapse whitespace"""
    joined = join_parts([entry.location, entry.display_name, value.label])
    return collapse_whitespace(joined)


def keep_hidden_prefix(candidate: str, stored_name: str) -> str:
    """Carry the stored name's '$' marker over to the candidate"""
    if stored_name.startswith(HIDDEN_PREFIX) and not candidate.startswith(HIDDEN_PREFIX):
        return HIDDEN_PREFIX + candidate
    return candidate


def compose_name(
    entry: ExternalEntry,
    value: ExternalValue,
    entry_key: str,
    rules: List[TransformRule],
    stored_name: Optional[str],
) -> ComposeResult:
    """
    Decide the name one entry should have

    Args:
        entry: External device record
        value: Property of that record
        entry_key: Key of the property in the registry
        rules: Ordered transformation rules
        stored_name: Name currently stored (None when the key is not stored)

    Returns:
        ComposeResult (RENAMED carries the unnormalized old and new names;
        EMPTY means nothing is left to name the entry with)
    """
    candidate = build_candidate(entry, value)
    candidate = apply_rules(entry_key, candidate, rules)

    if stored_name is None:
        return ComposeResult(status=ComposeStatus.MISSING, entry_key=entry_key, new_name=candidate)

    blank = not candidate.strip()
    candidate = keep_hidden_prefix(candidate, stored_name)

    if normalize_name(candidate) == normalize_name(stored_name):
        return ComposeResult(
            status=ComposeStatus.UNCHANGED, entry_key=entry_key,
            old_name=stored_name, new_name=stored_name,
        )

    if blank:
        return ComposeResult(
            status=ComposeStatus.EMPTY, entry_key=entry_key,
            old_name=stored_name, new_name=candidate,
        )

    return ComposeResult(
        status=ComposeStatus.RENAMED, entry_key=entry_key,
        old_name=stored_name, new_name=candidate,
    )
