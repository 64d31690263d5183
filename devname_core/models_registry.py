"""
models_registry.py - Core Data Structure Definitions

Contains:
- ExternalEntry / ExternalValue / ConfigTree: the configuration export
- TransformRule: one id-scoped text rewrite rule
- RenameDecision / CollisionRecord / Stats / RenamePlan: planning output
- UndoInstruction / ExecutionResult: mutation output
- RenameOptions: run configuration
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict
from enum import Enum
import re

from .errors import MissingEntryError, CollisionError, MutationError


class ComposeStatus(Enum):
    """Outcome of composing a name for one entry"""
    RENAMED = "renamed"
    UNCHANGED = "unchanged"
    MISSING = "missing"        # Entry key absent from the stored names
    EMPTY = "empty"            # Candidate is blank, stored name kept


class ExecutionStatus(Enum):
    """Outcome of the mutation phase"""
    NOTHING_TO_DO = "nothing_to_do"    # Plan had no decisions
    SIMULATED = "simulated"            # Dry run, storage untouched
    COMMITTED = "committed"            # Transaction committed
    ROLLED_BACK = "rolled_back"        # Aborted, no change retained


@dataclass
class ExternalValue:
    """One property of an external device record"""
    property_id: str
    label: str = ""


@dataclass
class DiscoveryRecord:
    """One item of an entry's discovery metadata map"""
    name: str
    identifiers: List[str] = field(default_factory=list)


@dataclass
class ExternalEntry:
    """One external device record"""
    location: Optional[str] = None
    display_name: Optional[str] = None
    values: List[ExternalValue] = field(default_factory=list)
    discovery: Dict[str, DiscoveryRecord] = field(default_factory=dict)


@dataclass
class ConfigTree:
    """Configuration export, entries in export order"""
    entries: List[ExternalEntry] = field(default_factory=list)

    @property
    def value_count(self) -> int:
        return sum(len(e.values) for e in self.entries)


@dataclass
class TransformRule:
    """
    Id-scoped text rewrite rule

    The rule fires for an entry when id_pattern is found in its entry key;
    it then replaces the first match of text_pattern with the literal
    replacement.
    """
    name: str
    id_pattern: str
    text_pattern: str
    replacement: str = ""
    description: str = ""
    _id_regex: re.Pattern = field(init=False, repr=False, compare=False)
    _text_regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # re.error propagates so loaders can reject the rule
        self._id_regex = re.compile(self.id_pattern)
        self._text_regex = re.compile(self.text_pattern)

    def matches(self, entry_key: str) -> bool:
        """Whether the rule applies to this entry key"""
        return self._id_regex.search(entry_key) is not None

    def apply(self, text: str) -> str:
        """Replace the first occurrence of text_pattern"""
        return self._text_regex.sub(lambda m: self.replacement, text, count=1)


@dataclass
class ComposeResult:
    """Result of NameComposer for one entry"""
    status: ComposeStatus
    entry_key: str
    old_name: Optional[str] = None
    new_name: Optional[str] = None


@dataclass
class RenameDecision:
    """Single planned rename"""
    entry_key: str
    old_name: str
    new_name: str


@dataclass
class CollisionRecord:
    """Two entries that would end up with the same normalized name"""
    normalized_name: str
    entry_key_a: str          # First-seen owner of the name
    entry_key_b: str

    @property
    def keys(self) -> tuple:
        return (self.entry_key_a, self.entry_key_b)


@dataclass
class Stats:
    """Planning counters"""
    renamed: int = 0
    unchanged: int = 0
    missing: int = 0
    excluded: int = 0
    collisions: int = 0
    errors: int = 0


@dataclass
class RenamePlan:
    """Batch rename plan"""
    decisions: List[RenameDecision] = field(default_factory=list)
    collisions: List[CollisionRecord] = field(default_factory=list)
    stats: Stats = field(default_factory=Stats)
    base_identifier: str = ""
    missing_keys: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        """Number of renames to perform"""
        return len(self.decisions)

    @property
    def colliding_keys(self) -> set:
        """Every key named on either side of a collision"""
        keys = set()
        for record in self.collisions:
            keys.update(record.keys)
        return keys

    def add_warning(self, msg: str) -> None:
        """Add warning"""
        self.warnings.append(msg)

    def ensure_complete(self) -> None:
        """
        Fail when the plan skipped entries

        Raises:
            MissingEntryError: some entry keys were not in storage
            CollisionError: some entries were dropped for sharing a name
        """
        if self.missing_keys:
            raise MissingEntryError(self.missing_keys)
        if self.collisions:
            raise CollisionError(
                [(c.normalized_name, c.entry_key_a, c.entry_key_b) for c in self.collisions]
            )

    def summary(self) -> str:
        """Generate summary"""
        s = self.stats
        lines = [
            f"Rename Plan Summary:",
            f"  - Base identifier: {self.base_identifier}",
            f"  - Renamed: {s.renamed}",
            f"  - Unchanged: {s.unchanged}",
            f"  - Missing: {s.missing}",
            f"  - Excluded: {s.excluded}",
            f"  - Collisions: {s.collisions}",
            f"  - Errors: {s.errors}",
        ]
        return "\n".join(lines)


@dataclass
class UndoInstruction:
    """Restores one entry to the name it had before the run"""
    entry_key: str
    restore_name: str
    current_name: str


@dataclass
class ExecutionResult:
    """Mutation phase outcome"""
    status: ExecutionStatus
    applied_count: int = 0
    untouched_count: int = 0                 # Rows already holding the target name
    errors: List[str] = field(default_factory=list)
    undo: List[UndoInstruction] = field(default_factory=list)
    failure: Optional[MutationError] = None

    @property
    def ok(self) -> bool:
        return self.status != ExecutionStatus.ROLLED_BACK

    @property
    def failed_key(self) -> Optional[str]:
        return self.failure.entry_key if self.failure else None

    def summary(self) -> str:
        """Generate summary"""
        lines = [
            f"Execution Result:",
            f"  - Status: {self.status.value}",
            f"  - Applied: {self.applied_count}",
            f"  - Already up to date: {self.untouched_count}",
            f"  - Errors: {len(self.errors)}",
        ]
        if self.errors:
            lines.append("Failure Details:")
            for error in self.errors[:10]:
                lines.append(f"  - {error}")
        return "\n".join(lines)


@dataclass
class RenameOptions:
    """Rename options configuration"""
    rules_path: Optional[str] = None
    exclude_ids: List[str] = field(default_factory=list)
    exclude_pattern: Optional[str] = None

    # Execution options
    dry_run: bool = False           # Preview only, do not actually execute
    strict: bool = False            # Refuse to apply when entries were skipped
    undo_path: Optional[str] = None

    # Registry table layout
    table: str = "DeviceStatus"
    key_column: str = "DeviceID"
    name_column: str = "Name"
