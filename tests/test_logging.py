"""
Tests for logging configuration.
"""

import logging
from pathlib import Path

from pkgplan.core.observability.logging_config import (
    ENV_FILE,
    ENV_LEVEL,
    _parse_level,
    resolve_level,
    setup_from_env,
    setup_logging,
)


class TestResolveLevel:
    def test_precedence(self):
        env = {ENV_LEVEL: "INFO"}
        assert resolve_level(debug=True, verbose=True, quiet=True, environ=env) == "DEBUG"
        assert resolve_level(verbose=True, quiet=True, environ=env) == "INFO"
        assert resolve_level(quiet=True, environ=env) == "ERROR"
        assert resolve_level(environ=env) == "INFO"

    def test_default(self):
        assert resolve_level(environ={}) == "WARNING"


class TestParseLevel:
    def test_names(self):
        assert _parse_level("debug") == logging.DEBUG
        assert _parse_level("ERROR") == logging.ERROR

    def test_unknown_or_empty(self):
        assert _parse_level("loud") == logging.WARNING
        assert _parse_level(None) == logging.WARNING


class TestSetupLogging:
    def test_console_level(self):
        setup_logging("INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "pkgplan.log"
        setup_logging("ERROR", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        logging.getLogger("pkgplan.test").debug("written to file only")
        for handler in root.handlers:
            handler.flush()
        assert "written to file only" in log_file.read_text()

    def test_from_env(self, tmp_path: Path, monkeypatch):
        log_file = tmp_path / "env.log"
        monkeypatch.setenv(ENV_FILE, str(log_file))
        setup_from_env("WARNING")
        assert any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)
