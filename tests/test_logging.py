"""Tests for logging setup."""
import logging

import pytest

from devname_core import get_logger, setup_logging


@pytest.fixture
def devname_logger(monkeypatch):
    monkeypatch.delenv("DEVNAME_LOG_LEVEL", raising=False)
    yield logging.getLogger("devname")
    setup_logging()


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_child_logger_namespace(self):
        """Module loggers live under 'devname'."""
        assert get_logger("plan").name == "devname.plan"

    def test_default_level_is_warning(self, devname_logger):
        """Without a level or environment setting only warnings show."""
        setup_logging()
        assert devname_logger.level == logging.WARNING

    def test_level_from_environment(self, devname_logger, monkeypatch):
        """DEVNAME_LOG_LEVEL sets the default level."""
        monkeypatch.setenv("DEVNAME_LOG_LEVEL", "debug")
        setup_logging()
        assert devname_logger.level == logging.DEBUG

    def test_unknown_environment_level_ignored(self, devname_logger, monkeypatch):
        """Garbage in DEVNAME_LOG_LEVEL falls back to WARNING."""
        monkeypatch.setenv("DEVNAME_LOG_LEVEL", "chatty")
        setup_logging()
        assert devname_logger.level == logging.WARNING

    def test_explicit_level_wins(self, devname_logger, monkeypatch):
        """The level argument overrides the environment."""
        monkeypatch.setenv("DEVNAME_LOG_LEVEL", "DEBUG")
        setup_logging(level=logging.ERROR)
        assert devname_logger.level == logging.ERROR

    def test_repeated_setup_keeps_one_handler(self, devname_logger):
        """Reconfiguring replaces handlers instead of stacking them."""
        setup_logging()
        setup_logging()
        assert len(devname_logger.handlers) == 1

    def test_log_file(self, devname_logger, tmp_path):
        """A log file receives INFO records while the console stays at WARNING."""
        log_file = tmp_path / "logs" / "devname.log"
        setup_logging(log_file=log_file)
        get_logger("test").info("hello")

        assert len(devname_logger.handlers) == 2
        assert devname_logger.handlers[0].level == logging.WARNING
        for handler in devname_logger.handlers:
            handler.flush()
        assert "[INFO] devname.test: hello" in log_file.read_text(encoding="utf-8")

        setup_logging()
        assert len(devname_logger.handlers) == 1
