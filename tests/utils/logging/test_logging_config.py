# ABOUTME: Tests for logging configuration module
# ABOUTME: Validates dual-mode logging setup and third-party library suppression

import logging
import os
from unittest.mock import patch

import pytest
from loguru import logger

from pokedict.utils.logging.config import (
    QUIETED_LOGGERS,
    LoggingMode,
    LoguruLogger,
    configure_logging,
    detect_logging_mode,
    get_logging_status,
)
from pokedict.utils.logging.utils import get_logger


class TestDetectLoggingMode:
    """Test logging mode detection logic."""

    def test_detect_mode_from_env_production(self):
        with patch.dict(os.environ, {"POKEDICT_LOG_MODE": "production"}):
            assert detect_logging_mode() == LoggingMode.PRODUCTION

    def test_detect_mode_from_env_is_case_insensitive(self):
        with patch.dict(os.environ, {"POKEDICT_LOG_MODE": "Interactive"}):
            assert detect_logging_mode() == LoggingMode.INTERACTIVE

    def test_detect_mode_from_env_invalid(self):
        """Invalid values fall back to TTY detection."""
        with (
            patch.dict(os.environ, {"POKEDICT_LOG_MODE": "invalid"}),
            patch("sys.stdout.isatty", return_value=True),
        ):
            assert detect_logging_mode() == LoggingMode.INTERACTIVE

    def test_detect_mode_from_tty_production(self):
        with patch.dict(os.environ, {}, clear=True), patch("sys.stdout.isatty", return_value=False):
            assert detect_logging_mode() == LoggingMode.PRODUCTION


class TestConfigureLogging:
    """Test logging configuration functionality."""

    def teardown_method(self):
        logger.remove()
        for logger_name in QUIETED_LOGGERS + ["py.warnings"]:
            logging.getLogger(logger_name).setLevel(logging.NOTSET)
        logging.captureWarnings(False)

    def test_configure_interactive_mode(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        configure_logging(mode=LoggingMode.INTERACTIVE, log_level="INFO")

        assert (tmp_path / "logs").is_dir()
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("PIL").level == logging.WARNING

    def test_configure_production_mode(self):
        configure_logging(mode=LoggingMode.PRODUCTION, log_level="DEBUG")

        assert logging.getLogger("html5lib").level == logging.WARNING

    @pytest.mark.parametrize("mode", [LoggingMode.INTERACTIVE, LoggingMode.PRODUCTION])
    def test_custom_log_file(self, tmp_path, monkeypatch, mode):
        monkeypatch.chdir(tmp_path)

        configure_logging(mode=mode, log_level="INFO", log_file=str(tmp_path / "custom.log"))


class TestGetLoggingStatus:
    """Test logging status reporting."""

    def test_interactive_status(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "logs").mkdir()

        with patch("pokedict.utils.logging.config.detect_logging_mode", return_value=LoggingMode.INTERACTIVE):
            status = get_logging_status()

        assert status["mode"] == LoggingMode.INTERACTIVE
        assert status["log_directory"] is not None
        assert status["log_files"]["main"].endswith("pokedict.log")
        assert "httpx" in status["third_party_suppressed"]

    def test_production_status(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        with patch("pokedict.utils.logging.config.detect_logging_mode", return_value=LoggingMode.PRODUCTION):
            status = get_logging_status()

        assert status["log_directory"] is None
        assert status["log_files"] == {"main": None, "json": None, "errors": None}


class TestStructlogBridge:
    """structlog events are written through loguru sinks."""

    def teardown_method(self):
        logger.remove()

    def test_events_reach_loguru(self, capsys):
        configure_logging(mode=LoggingMode.PRODUCTION, log_level="INFO")

        get_logger("pokedict.test").info("Fetched page", url="https://a.org/x")

        out = capsys.readouterr().out
        assert "Fetched page" in out
        assert "https://a.org/x" in out
        assert "pokedict.test" in out

    def test_level_filtering(self, capsys):
        configure_logging(mode=LoggingMode.PRODUCTION, log_level="WARNING")

        get_logger("pokedict.test").info("Quiet")
        get_logger("pokedict.test").warning("Loud")

        out = capsys.readouterr().out
        assert "Quiet" not in out
        assert "Loud" in out

    def test_logger_name_defaults(self):
        assert LoguruLogger().name == "pokedict"
        assert LoguruLogger("pokedict.services").name == "pokedict.services"
