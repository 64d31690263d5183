"""
cli_entry.py - CLI Entry Point

Supports:
- plan: preview the renames of a configuration export
- apply: rename registry entries (or simulate with --dry-run)
- rules: list the active transformation rules
"""

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

from devname_core import (
    ConfigLoadError, ResolutionError, StorageError, MissingEntryError, CollisionError,
    RenameOptions, RenamePlan, RuleSet, DeviceStore, ExecutionStatus,
    load_config_tree, plan_device_rename, validate_plan, execute_plan, save_undo_script,
    check_store_ready, setup_logging,
)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INPUT_ERROR = 2

PREVIEW_LIMIT = 50


def _add_plan_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", "-C", type=str, required=True, help="Configuration export (nodes JSON)")
    parser.add_argument("--db", type=str, required=True, help="Registry database (SQLite)")
    parser.add_argument("--rules", "-r", type=str, help="Rule document (YAML or JSON)")
    parser.add_argument("--exclude", "-x", action="append", default=[], metavar="KEY",
                        help="Entry key to leave alone (repeatable)")
    parser.add_argument("--exclude-file", type=str, help="File with one entry key per line")
    parser.add_argument("--exclude-pattern", type=str, help="Regex of entry keys to leave alone")
    parser.add_argument("--strict", action="store_true", help="Fail when entries are missing or collide")
    parser.add_argument("--table", type=str, default="DeviceStatus", help="Registry table")
    parser.add_argument("--key-column", type=str, default="DeviceID", help="Entry key column")
    parser.add_argument("--name-column", type=str, default="Name", help="Name column")


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser"""
    parser = argparse.ArgumentParser(
        prog="devname",
        description="Rename registry devices from a configuration export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Preview
  devname plan --config nodes.json --db domoticz.db

  # Simulate, then apply with an undo script
  devname apply --config nodes.json --db domoticz.db --dry-run
  devname apply --config nodes.json --db domoticz.db --undo-file undo.sql

  # Show the rules in use
  devname rules --rules my_rules.yaml
"""
    )
    parser.add_argument("--verbose", "-v", action="count", default=0, help="More logging (-vv for debug)")
    parser.add_argument("--log-file", type=str, help="Also write log records (INFO and up) to this file")

    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    plan_parser = subparsers.add_parser("plan", help="Preview renames")
    _add_plan_arguments(plan_parser)

    apply_parser = subparsers.add_parser("apply", help="Rename registry entries")
    _add_plan_arguments(apply_parser)
    apply_parser.add_argument("--dry-run", "-d", action="store_true", help="Preview only, do not execute")
    apply_parser.add_argument("--undo-file", "-u", type=str, help="Write an undo SQL script here")

    rules_parser = subparsers.add_parser("rules", help="List transformation rules")
    rules_parser.add_argument("--rules", "-r", type=str, help="Rule document (YAML or JSON)")

    return parser


def read_exclude_file(path: Path) -> List[str]:
    """Entry keys listed in a file (blank lines and # comments ignored)"""
    keys = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.split("#", 1)[0].strip()
            if line:
                keys.append(line)
    return keys


def options_from_args(args) -> RenameOptions:
    """Build RenameOptions from parsed arguments"""
    exclude_ids = list(args.exclude)
    if args.exclude_file:
        exclude_ids.extend(read_exclude_file(Path(args.exclude_file)))
    return RenameOptions(
        rules_path=args.rules,
        exclude_ids=exclude_ids,
        exclude_pattern=args.exclude_pattern,
        dry_run=getattr(args, "dry_run", False),
        strict=args.strict,
        undo_path=getattr(args, "undo_file", None),
        table=args.table,
        key_column=args.key_column,
        name_column=args.name_column,
    )


def print_rule_warnings(rule_set: RuleSet) -> None:
    for warning in rule_set.warnings:
        print(f"Warning: {warning}")


def print_plan(plan: RenamePlan) -> None:
    """Show decisions, collisions and the summary"""
    if plan.decisions:
        print(f"Will perform {plan.total_count} rename operations:")
        print("-" * 80)
        for d in plan.decisions[:PREVIEW_LIMIT]:
            print(f"  {d.entry_key}")
            print(f"      {d.old_name!r} -> {d.new_name!r}")
        if len(plan.decisions) > PREVIEW_LIMIT:
            print(f"  ... and {len(plan.decisions) - PREVIEW_LIMIT} more operations")
        print("-" * 80)
    else:
        print("No entries need renaming")

    if plan.collisions:
        print("Collisions (both entries skipped):")
        for c in plan.collisions:
            print(f"  - {c.normalized_name!r}: {c.entry_key_a}, {c.entry_key_b}")

    if plan.warnings:
        print("Warnings:")
        for warn in plan.warnings:
            print(f"  - {warn}")

    print(plan.summary())


def build_plan(options: RenameOptions, config_path: str, store: DeviceStore):
    """Load inputs and plan; returns (plan, snapshot)"""
    rule_set = RuleSet.load(options.rules_path)
    print_rule_warnings(rule_set)

    tree = load_config_tree(config_path)
    snapshot = store.load_snapshot()
    plan = plan_device_rename(
        tree,
        snapshot,
        rule_set.rules,
        exclude_ids=options.exclude_ids,
        exclude_pattern=options.exclude_pattern,
        duplicate_keys=store.duplicate_keys,
    )
    return plan, snapshot


def _open_store(options: RenameOptions, db_path: str) -> DeviceStore:
    return DeviceStore(
        db_path,
        table=options.table,
        key_column=options.key_column,
        name_column=options.name_column,
    )


def _check_inputs(args) -> Optional[str]:
    if not Path(args.config).is_file():
        return f"Configuration export does not exist: {args.config}"
    if not Path(args.db).is_file():
        return f"Database does not exist: {args.db}"
    if args.exclude_file and not Path(args.exclude_file).is_file():
        return f"Exclude file does not exist: {args.exclude_file}"
    if args.exclude_pattern:
        try:
            re.compile(args.exclude_pattern)
        except re.error as e:
            return f"Invalid --exclude-pattern: {e}"
    return None


def cmd_plan(args):
    """Handle plan command"""
    error = _check_inputs(args)
    if error:
        print(f"Error: {error}")
        return EXIT_INPUT_ERROR

    options = options_from_args(args)
    store = _open_store(options, args.db)
    try:
        plan, _ = build_plan(options, args.config, store)
    except (ConfigLoadError, ResolutionError, StorageError) as e:
        print(f"Error: {e}")
        return EXIT_INPUT_ERROR
    finally:
        store.dispose()

    print_plan(plan)

    if options.strict:
        try:
            plan.ensure_complete()
        except (MissingEntryError, CollisionError) as e:
            print(f"Error: {e}")
            return EXIT_FAILED
    return EXIT_OK


def cmd_apply(args):
    """Handle apply command"""
    error = _check_inputs(args)
    if error:
        print(f"Error: {error}")
        return EXIT_INPUT_ERROR

    options = options_from_args(args)

    if not options.dry_run:
        errors, warnings = check_store_ready(Path(args.db))
        for warn in warnings:
            print(f"Warning: {warn}")
        if errors:
            for err in errors:
                print(f"Error: {err}")
            return EXIT_FAILED

    store = _open_store(options, args.db)
    try:
        try:
            plan, snapshot = build_plan(options, args.config, store)
        except (ConfigLoadError, ResolutionError, StorageError) as e:
            print(f"Error: {e}")
            return EXIT_INPUT_ERROR

        print_plan(plan)

        if options.strict:
            try:
                plan.ensure_complete()
            except (MissingEntryError, CollisionError) as e:
                print(f"Error: {e}")
                print("Nothing was changed")
                return EXIT_FAILED

        problems = validate_plan(plan)
        if problems:
            for problem in problems:
                print(f"Error: {problem}")
            return EXIT_FAILED

        if options.dry_run:
            print("\n[Preview mode] Will not actually execute")
        else:
            print("\nExecuting...")
        result = execute_plan(plan, store, snapshot=snapshot, dry_run=options.dry_run)
    finally:
        store.dispose()

    print(result.summary())

    if result.status == ExecutionStatus.ROLLED_BACK:
        print("Rename batch aborted, no change was committed")
        return EXIT_FAILED

    if options.undo_path and result.undo:
        path = save_undo_script(
            result.undo,
            options.undo_path,
            table=options.table,
            key_column=options.key_column,
            name_column=options.name_column,
        )
        print(f"Undo script: {path}")

    return EXIT_OK


def cmd_rules(args):
    """Handle rules command"""
    rule_set = RuleSet.load(args.rules)
    print_rule_warnings(rule_set)
    print(f"Rules from {rule_set.source}:")
    for i, rule in enumerate(rule_set.rules, start=1):
        print(f"  {i}. {rule.name}")
        print(f"     id: {rule.id_pattern}")
        print(f"     {rule.text_pattern!r} -> {rule.replacement!r}")
        if rule.description:
            print(f"     {rule.description}")
    return EXIT_OK


def _log_level(verbose: int) -> Optional[int]:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return None


def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(level=_log_level(args.verbose), log_file=args.log_file)

    if args.command == "plan":
        return cmd_plan(args)
    elif args.command == "apply":
        return cmd_apply(args)
    elif args.command == "rules":
        return cmd_rules(args)
    else:
        parser.print_help()
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
