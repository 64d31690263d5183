"""
load_config.py - Configuration Export Loading Module

Turns a JSON node export into a typed ConfigTree
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json

from ._logging import get_logger
from .errors import ConfigLoadError
from .models_registry import ConfigTree, DiscoveryRecord, ExternalEntry, ExternalValue

logger = get_logger("config")


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _items(container: Any) -> List[Any]:
    """Items of a list, or values of a mapping, in order"""
    if isinstance(container, dict):
        return list(container.values())
    if isinstance(container, list):
        return container
    return []


def _parse_identifiers(record: Dict[str, Any]) -> List[str]:
    payload = record.get("discovery_payload")
    if not isinstance(payload, dict):
        return []
    device = payload.get("device")
    if not isinstance(device, dict):
        return []
    identifiers = device.get("identifiers")
    if isinstance(identifiers, str):
        return [identifiers]
    if not isinstance(identifiers, list):
        return []
    return [i for i in identifiers if isinstance(i, str)]


def parse_value(raw: Dict[str, Any]) -> Optional[ExternalValue]:
    """Build an ExternalValue, None when it has no id"""
    property_id = raw.get("id")
    if property_id is None or str(property_id) == "":
        return None
    return ExternalValue(property_id=str(property_id), label=str(raw.get("label") or ""))


def parse_entry(raw: Dict[str, Any]) -> ExternalEntry:
    """
    Build an ExternalEntry from one exported node

    Args:
        raw: Node mapping with optional loc, name, values and hassDevices

    Returns:
        ExternalEntry
    """
    values = []
    for item in _items(raw.get("values")):
        if not isinstance(item, dict):
            continue
        value = parse_value(item)
        if value is not None:
            values.append(value)

    discovery = {}
    hass_devices = raw.get("hassDevices")
    if isinstance(hass_devices, dict):
        for name, record in hass_devices.items():
            if isinstance(record, dict):
                discovery[str(name)] = DiscoveryRecord(name=str(name), identifiers=_parse_identifiers(record))

    return ExternalEntry(
        location=_optional_str(raw.get("loc")),
        display_name=_optional_str(raw.get("name")),
        values=values,
        discovery=discovery,
    )


def parse_config_tree(data: Any) -> ConfigTree:
    """
    Build a ConfigTree from parsed JSON

    Args:
        data: A list of nodes, or a mapping with a 'nodes' list or mapping

    Returns:
        ConfigTree (non-mapping nodes are skipped)

    Raises:
        ConfigLoadError: The top-level shape is not recognized
    """
    if isinstance(data, dict):
        if "nodes" not in data:
            raise ConfigLoadError("Configuration export has no 'nodes'")
        data = data["nodes"]
    if not isinstance(data, (list, dict)):
        raise ConfigLoadError("Configuration export must be a list of nodes")

    entries = [parse_entry(node) for node in _items(data) if isinstance(node, dict)]
    return ConfigTree(entries=entries)


def load_config_tree(path: Union[str, Path]) -> ConfigTree:
    """
    Read a configuration export file

    Raises:
        ConfigLoadError: The file cannot be read or is not valid JSON
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigLoadError(f"Cannot read configuration export {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Configuration export {path} is not valid JSON: {e}") from e

    tree = parse_config_tree(data)
    logger.info("Loaded %d entries (%d values) from %s", len(tree.entries), tree.value_count, path)
    return tree
