"""
exec_rename.py - Rename Execution Module

Responsibilities:
- Apply a rename plan in one transaction (all or nothing)
- dry_run support
- Undo instructions and undo scripts
"""

from pathlib import Path
from typing import Dict, List, Optional, Union
from datetime import datetime

from ._logging import get_logger
from .device_store import DeviceStore
from .errors import MutationError, StorageError
from .models_registry import (
    ExecutionResult, ExecutionStatus, RenameDecision,
    RenamePlan, UndoInstruction,
)
from .text_match import sql_quote

logger = get_logger("exec")


def build_undo(decisions: List[RenameDecision]) -> List[UndoInstruction]:
    """Inverse of each decision, in decision order"""
    return [
        UndoInstruction(entry_key=d.entry_key, restore_name=d.old_name, current_name=d.new_name)
        for d in decisions
    ]


def execute_plan(
    plan: RenamePlan,
    store: DeviceStore,
    snapshot: Optional[Dict[str, str]] = None,
    dry_run: bool = False,
) -> ExecutionResult:
    """
    Execute rename plan

    Args:
        plan: Rename plan
        store: Registry database
        snapshot: Stored names, updated after a successful commit
        dry_run: Whether to preview only

    Returns:
        Execution result (a failed batch is reported, not raised)
    """
    decisions = plan.decisions
    total = len(decisions)

    if total == 0:
        return ExecutionResult(status=ExecutionStatus.NOTHING_TO_DO)

    if dry_run:
        for d in decisions:
            logger.debug("[Preview] %s: %r -> %r", d.entry_key, d.old_name, d.new_name)
        logger.info("Dry run: %d rename(s) simulated", total)
        return ExecutionResult(
            status=ExecutionStatus.SIMULATED,
            applied_count=total,
            undo=build_undo(decisions),
        )

    pending: Dict[str, str] = {}
    untouched = 0
    try:
        with store.transaction() as batch:
            for d in decisions:
                rows = batch.update_name(d.entry_key, d.new_name)
                if rows == 0:
                    untouched += 1
                    logger.debug("%s already named %r", d.entry_key, d.new_name)
                pending[d.entry_key] = d.new_name
    except StorageError as e:
        failure = MutationError(f"Rename batch rolled back: {e}", entry_key=e.entry_key)
        logger.error("%s", failure)
        return ExecutionResult(
            status=ExecutionStatus.ROLLED_BACK,
            errors=[str(e)],
            failure=failure,
        )

    if snapshot is not None:
        snapshot.update(pending)

    logger.info("Committed %d rename(s)", total)
    return ExecutionResult(
        status=ExecutionStatus.COMMITTED,
        applied_count=total,
        untouched_count=untouched,
        undo=build_undo(decisions),
    )


def apply_undo(instructions: List[UndoInstruction], snapshot: Dict[str, str]) -> Dict[str, str]:
    """Replay undo instructions on a snapshot in place"""
    for instruction in instructions:
        snapshot[instruction.entry_key] = instruction.restore_name
    return snapshot


def execute_undo(
    instructions: List[UndoInstruction],
    store: DeviceStore,
    snapshot: Optional[Dict[str, str]] = None,
) -> ExecutionResult:
    """Replay undo instructions against the store in one transaction"""
    plan = RenamePlan(
        decisions=[
            RenameDecision(entry_key=i.entry_key, old_name=i.current_name, new_name=i.restore_name)
            for i in instructions
        ]
    )
    plan.stats.renamed = len(plan.decisions)
    return execute_plan(plan, store, snapshot=snapshot)


def render_undo_sql(
    instructions: List[UndoInstruction],
    table: str = "DeviceStatus",
    key_column: str = "DeviceID",
    name_column: str = "Name",
) -> str:
    """SQL script restoring the names replaced by a run"""
    lines = [
        f"-- Undo script generated {datetime.now().isoformat(timespec='seconds')}",
        f"-- {len(instructions)} statement(s)",
        "BEGIN TRANSACTION;",
    ]
    for i in instructions:
        lines.append(
            f"UPDATE {table} SET {name_column} = {sql_quote(i.restore_name)} "
            f"WHERE {key_column} = {sql_quote(i.entry_key)};"
        )
    lines.append("COMMIT;")
    return "\n".join(lines) + "\n"


def save_undo_script(
    instructions: List[UndoInstruction],
    path: Union[str, Path],
    table: str = "DeviceStatus",
    key_column: str = "DeviceID",
    name_column: str = "Name",
) -> Path:
    """Write the undo script"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        f.write(render_undo_sql(instructions, table, key_column, name_column))

    logger.info("Undo script with %d statement(s) written to %s", len(instructions), path)
    return path
