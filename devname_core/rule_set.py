"""
rule_set.py - Transformation Rules Module

Provides the built-in rules, loading of external rule documents and
first-match rule application
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union
import re

import yaml

from ._logging import get_logger
from .errors import RuleLoadError
from .models_registry import TransformRule

logger = get_logger("rules")

DEFAULT_SOURCE = "<defaults>"


def default_rules() -> List[TransformRule]:
    """Built-in rule list (a fresh copy on every call)"""
    return [
        TransformRule(
            name="switch_multilevel_current_value",
            id_pattern=r"38-\d+-currentValue$",
            text_pattern=r"\s*-\s*Current value$",
            replacement="",
            description="Drop the 'Current value' suffix of dimmers and shutters",
        ),
        TransformRule(
            name="switch_binary_current_value",
            id_pattern=r"37-\d+-currentValue$",
            text_pattern=r"\s*-\s*Current value$",
            replacement="",
            description="Drop the 'Current value' suffix of on/off switches",
        ),
        TransformRule(
            name="meter_energy_kwh",
            id_pattern=r"50-\d+-value-65537$",
            text_pattern=r"Electric Consumption \[kWh\]",
            replacement="kWh",
            description="Abbreviate energy meter readings",
        ),
        TransformRule(
            name="meter_power_w",
            id_pattern=r"50-\d+-value-66049$",
            text_pattern=r"Electric Consumption \[W\]",
            replacement="W",
            description="Abbreviate power meter readings",
        ),
        TransformRule(
            name="air_temperature",
            id_pattern=r"49-\d+-Air_temperature$",
            text_pattern=r"Air temperature",
            replacement="Temp",
            description="Shorten temperature sensor labels",
        ),
        TransformRule(
            name="illuminance",
            id_pattern=r"49-\d+-Illuminance$",
            text_pattern=r"Illuminance",
            replacement="Lux",
            description="Shorten illuminance sensor labels",
        ),
        TransformRule(
            name="motion_sensor",
            id_pattern=r"113-\d+-Home_Security-Motion_sensor_status$",
            text_pattern=r"Motion sensor status",
            replacement="Motion",
            description="Shorten motion sensor labels",
        ),
    ]


def _parse_rule(item, index: int) -> TransformRule:
    if not isinstance(item, dict):
        raise RuleLoadError(f"Rule #{index} is not a mapping")
    for required in ("pattern", "replace"):
        if not isinstance(item.get(required), str):
            raise RuleLoadError(f"Rule #{index} has no '{required}' string")
    replacement = item.get("with", "")
    if replacement is None:
        replacement = ""
    try:
        return TransformRule(
            name=str(item.get("name") or f"rule_{index}"),
            id_pattern=item["pattern"],
            text_pattern=item["replace"],
            replacement=str(replacement),
            description=str(item.get("description") or ""),
        )
    except re.error as e:
        raise RuleLoadError(f"Rule #{index} has an invalid regex: {e}") from e


def parse_rules(document) -> List[TransformRule]:
    """
    Build rules from a parsed rule document

    Args:
        document: A list of rule objects, or a mapping with a 'rules' list

    Returns:
        Rules in document order

    Raises:
        RuleLoadError: The document is malformed
    """
    if isinstance(document, dict):
        document = document.get("rules")
    if not isinstance(document, list):
        raise RuleLoadError("Rule document must be a list of rules or a mapping with a 'rules' list")
    return [_parse_rule(item, i) for i, item in enumerate(document, start=1)]


def read_rules(path: Union[str, Path]) -> List[TransformRule]:
    """
    Read a YAML or JSON rule document

    Raises:
        RuleLoadError: The file cannot be read or is malformed
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise RuleLoadError(f"Cannot read rule file {path}: {e}") from e
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise RuleLoadError(f"Cannot parse rule file {path}: {e}") from e
    return parse_rules(document)


@dataclass
class RuleSet:
    """Ordered rules and where they came from"""
    rules: List[TransformRule] = field(default_factory=default_rules)
    source: str = DEFAULT_SOURCE
    warnings: List[str] = field(default_factory=list)

    @property
    def is_default(self) -> bool:
        return self.source == DEFAULT_SOURCE

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "RuleSet":
        """
        Load rules, falling back to the defaults

        A missing or malformed document never raises: the defaults are
        returned and the problem is recorded in warnings.

        Args:
            path: Rule document path (None means defaults)

        Returns:
            RuleSet
        """
        if path is None:
            return cls()
        try:
            rules = read_rules(path)
        except RuleLoadError as e:
            logger.warning("Falling back to default rules: %s", e)
            return cls(warnings=[f"{e}; using default rules"])
        logger.info("Loaded %d rule(s) from %s", len(rules), path)
        return cls(rules=rules, source=str(path))


def find_rule(entry_key: str, rules: List[TransformRule]) -> Optional[TransformRule]:
    """First rule whose id pattern is found in entry_key"""
    return next((rule for rule in rules if rule.matches(entry_key)), None)


def apply_rules(entry_key: str, name: str, rules: List[TransformRule]) -> str:
    """
    Apply the first matching rule to a name

    Args:
        entry_key: Entry key the id patterns are searched in
        name: Candidate name
        rules: Ordered rules

    Returns:
        Rewritten name, or name itself when no rule matches
    """
    rule = find_rule(entry_key, rules)
    if rule is None:
        return name
    new_name = rule.apply(name)
    if new_name != name:
        logger.debug("Rule %s: %r -> %r", rule.name, name, new_name)
    return new_name
