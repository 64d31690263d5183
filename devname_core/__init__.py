"""
devname_core - Device Rename Engine

Provides configuration loading, rename plan generation, execution, undo, etc.
"""

from ._logging import get_logger, setup_logging

from .errors import (
    RenamerError,
    ConfigLoadError,
    ResolutionError,
    RuleLoadError,
    StorageError,
    MutationError,
    MissingEntryError,
    CollisionError,
)

from .models_registry import (
    ExternalValue,
    ExternalEntry,
    DiscoveryRecord,
    ConfigTree,
    TransformRule,
    ComposeStatus,
    ComposeResult,
    RenameDecision,
    CollisionRecord,
    Stats,
    RenamePlan,
    UndoInstruction,
    ExecutionStatus,
    ExecutionResult,
    RenameOptions,
)

from .text_match import (
    join_parts,
    collapse_whitespace,
    normalize_name,
)

from .rule_set import (
    RuleSet,
    default_rules,
    parse_rules,
    read_rules,
    find_rule,
    apply_rules,
)

from .load_config import (
    parse_config_tree,
    load_config_tree,
)

from .resolve_identifier import (
    resolve_base_identifier,
    make_entry_key,
    strip_node_suffix,
)

from .compose_name import (
    build_candidate,
    compose_name,
)

from .plan_rename import (
    plan_device_rename,
    validate_plan,
    CollisionTracker,
)

from .device_store import DeviceStore

from .exec_rename import (
    execute_plan,
    build_undo,
    apply_undo,
    execute_undo,
    render_undo_sql,
    save_undo_script,
)

from .safety_checks import (
    check_writable,
    check_database_file,
    check_lock_files,
    check_store_ready,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",

    # Errors
    "RenamerError",
    "ConfigLoadError",
    "ResolutionError",
    "RuleLoadError",
    "StorageError",
    "MutationError",
    "MissingEntryError",
    "CollisionError",

    # Data models
    "ExternalValue",
    "ExternalEntry",
    "DiscoveryRecord",
    "ConfigTree",
    "TransformRule",
    "ComposeStatus",
    "ComposeResult",
    "RenameDecision",
    "CollisionRecord",
    "Stats",
    "RenamePlan",
    "UndoInstruction",
    "ExecutionStatus",
    "ExecutionResult",
    "RenameOptions",

    # Text processing
    "join_parts",
    "collapse_whitespace",
    "normalize_name",

    # Rules
    "RuleSet",
    "default_rules",
    "parse_rules",
    "read_rules",
    "find_rule",
    "apply_rules",

    # Configuration export
    "parse_config_tree",
    "load_config_tree",
    "resolve_base_identifier",
    "make_entry_key",
    "strip_node_suffix",

    # Planning
    "build_candidate",
    "compose_name",
    "plan_device_rename",
    "validate_plan",
    "CollisionTracker",

    # Storage and execution
    "DeviceStore",
    "execute_plan",
    "build_undo",
    "apply_undo",
    "execute_undo",
    "render_undo_sql",
    "save_undo_script",

    # Safety checks
    "check_writable",
    "check_database_file",
    "check_lock_files",
    "check_store_ready",
]
