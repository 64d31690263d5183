"""
resolve_identifier.py - Base Identifier Resolution

Finds the identifier shared by every entry of an export and derives entry keys
"""

import re

from ._logging import get_logger
from .errors import ResolutionError
from .models_registry import ConfigTree

logger = get_logger("resolve")

_NODE_SUFFIX = re.compile(r"_node\d+$")


def strip_node_suffix(identifier: str) -> str:
    """Remove a trailing _node<digits>"""
    return _NODE_SUFFIX.sub("", identifier)


def resolve_base_identifier(tree: ConfigTree) -> str:
    """
    Find the base identifier of an export

    Entries are scanned in order, then each entry's discovery records in
    insertion order. The first identifier found anywhere wins.

    Args:
        tree: Configuration tree

    Returns:
        Non-empty base identifier

    Raises:
        ResolutionError: No entry exposes an identifier
    """
    for entry in tree.entries:
        for record in entry.discovery.values():
            if not record.identifiers:
                continue
            base = strip_node_suffix(record.identifiers[0].strip())
            if not base:
                logger.debug("Skipping empty identifier in discovery record %s", record.name)
                continue
            logger.info("Base identifier %r (from %s)", base, record.name)
            return base

    raise ResolutionError("No entry in the configuration export exposes a discovery identifier")


def make_entry_key(base_identifier: str, property_id: str) -> str:
    """Entry key for one value: {base}_{property_id}, spaces as underscores"""
    return f"{base_identifier}_{property_id}".replace(" ", "_")
