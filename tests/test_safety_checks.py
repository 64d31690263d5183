"""Tests for database pre-flight checks."""
from devname_core import check_database_file, check_lock_files, check_store_ready, check_writable


class TestSafetyChecks:
    """Tests for safety_checks."""

    def test_existing_database_is_ready(self, db_file):
        """A plain writable database passes."""
        assert check_store_ready(db_file) == ([], [])

    def test_missing_database(self, tmp_path):
        """A missing file is an error."""
        valid, error = check_database_file(tmp_path / "absent.db")
        assert not valid
        assert "does not exist" in error

    def test_directory_is_not_a_database(self, tmp_path):
        """Directories are rejected."""
        valid, error = check_database_file(tmp_path)
        assert not valid
        assert "not a file" in error

    def test_missing_parent(self, tmp_path):
        """New files need an existing parent directory."""
        valid, error = check_writable(tmp_path / "nope" / "file.db")
        assert not valid
        assert "Parent directory" in error

    def test_lock_files_warn(self, db_file):
        """Journal and WAL side files produce warnings."""
        (db_file.parent / (db_file.name + "-journal")).write_bytes(b"")
        (db_file.parent / (db_file.name + "-wal")).write_bytes(b"")
        warnings = check_lock_files(db_file)
        assert len(warnings) == 2
        errors, store_warnings = check_store_ready(db_file)
        assert errors == []
        assert store_warnings == warnings
