"""
plan_rename.py - Rename Plan Generation Module

Responsibilities:
- Walk every value of every entry in export order
- Compose the target name of each entry
- Collision detection (both sides of a collision are dropped)
- Output RenamePlan
"""

from typing import Dict, Iterable, List, Mapping, Optional, Set, Union
import re

from ._logging import get_logger
from .compose_name import compose_name
from .models_registry import (
    CollisionRecord, ComposeStatus, ConfigTree,
    RenameDecision, RenamePlan, TransformRule,
)
from .resolve_identifier import make_entry_key, resolve_base_identifier
from .text_match import normalize_name

logger = get_logger("plan")


class CollisionTracker:
    """Collision tracker"""

    def __init__(self):
        # key: normalized name, value: first entry key that claimed it
        self.owners: Dict[str, str] = {}
        self.collisions: List[CollisionRecord] = []

    def claim(self, entry_key: str, new_name: str) -> Optional[CollisionRecord]:
        """
        Claim a name for an entry

        Args:
            entry_key: Entry claiming the name
            new_name: Proposed name (normalized here)

        Returns:
            CollisionRecord when another entry already owns the name, else None
        """
        normalized = normalize_name(new_name)
        owner = self.owners.get(normalized)
        if owner is None or owner == entry_key:
            self.owners[normalized] = entry_key
            return None

        # The first-seen owner keeps the name in the bookkeeping
        record = CollisionRecord(normalized_name=normalized, entry_key_a=owner, entry_key_b=entry_key)
        self.collisions.append(record)
        return record


def _compile_exclude(pattern: Union[str, re.Pattern, None]) -> Optional[re.Pattern]:
    if pattern is None or pattern == "":
        return None
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern


def plan_device_rename(
    tree: ConfigTree,
    snapshot: Mapping[str, str],
    rules: List[TransformRule],
    exclude_ids: Optional[Iterable[str]] = None,
    exclude_pattern: Union[str, re.Pattern, None] = None,
    duplicate_keys: Optional[Iterable[str]] = None,
) -> RenamePlan:
    """
    Generate the rename plan of one configuration export

    Args:
        tree: Configuration tree
        snapshot: Stored names by entry key (not modified)
        rules: Ordered transformation rules
        exclude_ids: Entry keys to leave alone
        exclude_pattern: Regex; entry keys it is found in are left alone
        duplicate_keys: Keys stored on several rows; skipped and counted as errors

    Returns:
        Rename plan, decisions in export order

    Raises:
        ResolutionError: No base identifier in the export
        re.error: exclude_pattern is not a valid regex
    """
    base = resolve_base_identifier(tree)
    excluded_keys = set(exclude_ids or ())
    exclude_regex = _compile_exclude(exclude_pattern)
    ambiguous_keys = set(duplicate_keys or ())

    plan = RenamePlan(base_identifier=base)
    stats = plan.stats
    tracker = CollisionTracker()
    # Working copy so repeated keys see the names planned earlier in this pass
    names = dict(snapshot)
    planned: Dict[str, RenameDecision] = {}
    draft: List[RenameDecision] = []

    for entry in tree.entries:
        for value in entry.values:
            entry_key = make_entry_key(base, value.property_id)

            if entry_key in excluded_keys or (exclude_regex and exclude_regex.search(entry_key)):
                stats.excluded += 1
                logger.debug("Excluded %s", entry_key)
                continue

            if entry_key in ambiguous_keys:
                stats.errors += 1
                plan.add_warning(f"{entry_key} is stored on several rows; not renamed")
                continue

            result = compose_name(entry, value, entry_key, rules, names.get(entry_key))

            if result.status == ComposeStatus.MISSING:
                stats.missing += 1
                plan.missing_keys.append(entry_key)
                logger.debug("Missing from registry: %s", entry_key)
                continue

            if result.status == ComposeStatus.UNCHANGED:
                stats.unchanged += 1
                continue

            if result.status == ComposeStatus.EMPTY:
                stats.errors += 1
                plan.add_warning(f"{entry_key} has nothing to be named after; keeping {result.old_name!r}")
                continue

            if entry_key in planned:
                stats.errors += 1
                plan.add_warning(
                    f"Duplicate entry key {entry_key}: keeping {planned[entry_key].new_name!r}, "
                    f"ignoring {result.new_name!r}"
                )
                continue

            collision = tracker.claim(entry_key, result.new_name)
            if collision is not None:
                stats.collisions += 1
                logger.warning(
                    "Name collision on %r between %s and %s",
                    collision.normalized_name, collision.entry_key_a, collision.entry_key_b,
                )
                continue

            decision = RenameDecision(entry_key=entry_key, old_name=result.old_name, new_name=result.new_name)
            planned[entry_key] = decision
            draft.append(decision)
            names[entry_key] = result.new_name

    plan.collisions = tracker.collisions
    colliding = plan.colliding_keys
    plan.decisions = [d for d in draft if d.entry_key not in colliding]
    stats.renamed = len(plan.decisions)

    logger.info(
        "Planned %d rename(s): %d unchanged, %d missing, %d excluded, %d collision(s)",
        stats.renamed, stats.unchanged, stats.missing, stats.excluded, stats.collisions,
    )
    return plan


def validate_plan(plan: RenamePlan) -> List[str]:
    """
    Validate rename plan

    Args:
        plan: Rename plan

    Returns:
        Error list (empty for a plan produced by plan_device_rename)
    """
    errors = []

    seen: Set[str] = set()
    for decision in plan.decisions:
        if decision.entry_key in seen:
            errors.append(f"Entry key planned twice: {decision.entry_key}")
        seen.add(decision.entry_key)

    targets: Dict[str, str] = {}
    for decision in plan.decisions:
        normalized = normalize_name(decision.new_name)
        if normalized in targets:
            errors.append(
                f"Multiple entries have the same target name: {targets[normalized]}, "
                f"{decision.entry_key} -> {normalized!r}"
            )
        else:
            targets[normalized] = decision.entry_key

    for key in plan.colliding_keys & seen:
        errors.append(f"Colliding entry still planned: {key}")

    return errors
