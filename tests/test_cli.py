"""Tests for the command line interface."""
import json

import pytest

from devname_cli import main
from devname_cli.cli_entry import EXIT_FAILED, EXIT_INPUT_ERROR, EXIT_OK, read_exclude_file
from devname_core import DeviceStore, setup_logging

from conftest import KEY_DIMMER, KEY_MOTION, KEY_POWER, create_registry


def _read(db_file):
    store = DeviceStore(db_file)
    try:
        return store.load_snapshot()
    finally:
        store.dispose()


def _args(command, config_file, db_file, *extra):
    return [command, "--config", str(config_file), "--db", str(db_file), *extra]


class TestPlanCommand:
    """Tests for 'plan'."""

    def test_prints_plan(self, config_file, db_file, stored_names, capsys):
        """Decisions and stats are printed, nothing is written."""
        code = main(_args("plan", config_file, db_file))
        out = capsys.readouterr().out

        assert code == EXIT_OK
        assert "Will perform 3 rename operations" in out
        assert KEY_DIMMER in out
        assert "'Living Room - Dimmer'" in out
        assert "Missing: 1" in out
        assert _read(db_file) == stored_names

    def test_strict_fails_on_missing(self, config_file, db_file, capsys):
        """--strict turns missing entries into a failure."""
        assert main(_args("plan", config_file, db_file, "--strict")) == EXIT_FAILED
        assert "not found in registry" in capsys.readouterr().out

    def test_unresolvable_export(self, tmp_path, db_file, capsys):
        """An export without identifiers is an input error."""
        path = tmp_path / "bare.json"
        path.write_text(json.dumps([{"loc": "A", "values": [{"id": "1", "label": "x"}]}]))
        assert main(_args("plan", path, db_file)) == EXIT_INPUT_ERROR
        assert "discovery identifier" in capsys.readouterr().out

    def test_missing_config_file(self, tmp_path, db_file, capsys):
        """A missing export is reported."""
        assert main(_args("plan", tmp_path / "absent.json", db_file)) == EXIT_INPUT_ERROR

    def test_invalid_exclude_pattern(self, config_file, db_file, capsys):
        """Bad regexes are rejected before planning."""
        assert main(_args("plan", config_file, db_file, "--exclude-pattern", "(")) == EXIT_INPUT_ERROR
        assert "Invalid --exclude-pattern" in capsys.readouterr().out

    def test_bad_rules_file_warns(self, tmp_path, config_file, db_file, capsys):
        """A broken rule file falls back to defaults with a warning."""
        rules = tmp_path / "rules.yaml"
        rules.write_text("- [broken\n", encoding="utf-8")
        assert main(_args("plan", config_file, db_file, "--rules", str(rules))) == EXIT_OK
        out = capsys.readouterr().out
        assert "Warning:" in out
        assert "Will perform 3 rename operations" in out

    def test_duplicated_registry_key_warned(self, tmp_path, config_file, stored_names, capsys):
        """A key stored on two rows is reported and left out of the plan."""
        db = create_registry(tmp_path / "shared.db", stored_names, extra_rows=[(KEY_DIMMER, "Twin")])
        assert main(_args("plan", config_file, db)) == EXIT_OK
        out = capsys.readouterr().out
        assert "Will perform 2 rename operations" in out
        assert f"{KEY_DIMMER} is stored on several rows" in out
        assert "Errors: 1" in out

    def test_log_file(self, tmp_path, config_file, db_file):
        """--log-file records the run milestones."""
        log_file = tmp_path / "run.log"
        assert main(["--log-file", str(log_file), *_args("plan", config_file, db_file)]) == EXIT_OK
        setup_logging()
        text = log_file.read_text(encoding="utf-8")
        assert "Loaded 5 stored name(s)" in text
        assert "Planned 3 rename(s)" in text


class TestApplyCommand:
    """Tests for 'apply'."""

    def test_dry_run(self, config_file, db_file, stored_names, capsys):
        """Dry runs simulate without writing."""
        code = main(_args("apply", config_file, db_file, "--dry-run"))
        out = capsys.readouterr().out

        assert code == EXIT_OK
        assert "[Preview mode]" in out
        assert "Status: simulated" in out
        assert _read(db_file) == stored_names

    def test_apply_writes_and_saves_undo(self, tmp_path, config_file, db_file, capsys):
        """Applying renames the entries and writes the undo script."""
        undo = tmp_path / "undo.sql"
        code = main(_args("apply", config_file, db_file, "--undo-file", str(undo)))

        assert code == EXIT_OK
        after = _read(db_file)
        assert after[KEY_DIMMER] == "Living Room - Dimmer"
        assert after[KEY_POWER] == "$Living Room - Dimmer - W"
        assert "Old dimmer" in undo.read_text(encoding="utf-8")
        assert "Status: committed" in capsys.readouterr().out

    def test_apply_twice_is_idempotent(self, config_file, db_file, capsys):
        """The second run has nothing to do."""
        main(_args("apply", config_file, db_file))
        capsys.readouterr()
        assert main(_args("apply", config_file, db_file)) == EXIT_OK
        out = capsys.readouterr().out
        assert "No entries need renaming" in out
        assert "Status: nothing_to_do" in out

    def test_exclusions(self, tmp_path, config_file, db_file, stored_names):
        """Excluded keys are left alone."""
        exclude = tmp_path / "exclude.txt"
        exclude.write_text(f"# keep\n{KEY_DIMMER}\n\n", encoding="utf-8")
        code = main(_args("apply", config_file, db_file, "--exclude-file", str(exclude),
                          "--exclude-pattern", "Motion"))

        assert code == EXIT_OK
        after = _read(db_file)
        assert after[KEY_DIMMER] == stored_names[KEY_DIMMER]
        assert after[KEY_MOTION] == stored_names[KEY_MOTION]
        assert after[KEY_POWER] == "$Living Room - Dimmer - W"

    def test_strict_apply_changes_nothing(self, config_file, db_file, stored_names, capsys):
        """--strict stops before executing."""
        assert main(_args("apply", config_file, db_file, "--strict")) == EXIT_FAILED
        assert _read(db_file) == stored_names


class TestRulesCommand:
    """Tests for 'rules'."""

    def test_lists_defaults(self, capsys):
        """The built-in rules are listed."""
        assert main(["rules"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "Rules from <defaults>" in out
        assert "7. motion_sensor" in out


class TestHelpers:
    """Tests for CLI helpers."""

    def test_read_exclude_file(self, tmp_path):
        """Comments and blank lines are ignored."""
        path = tmp_path / "x.txt"
        path.write_text("a\n  # comment\nb  # trailing\n\n", encoding="utf-8")
        assert read_exclude_file(path) == ["a", "b"]

    def test_no_command_prints_help(self, capsys):
        """Without a subcommand the help is shown."""
        assert main([]) == EXIT_FAILED
        assert "usage:" in capsys.readouterr().out

    def test_required_arguments(self):
        """plan needs --config and --db."""
        with pytest.raises(SystemExit):
            main(["plan"])
