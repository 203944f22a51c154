"""
VOICEGIT Unit Tests - Logging Configuration

Unit tests for voicegit/logging_config.py.
Tests setup_logging, get_logger, set_service_level, and the dry-run logger.

Run:
    pytest tests/unit/test_logging_config.py -v
"""

import logging
import sys
from logging.handlers import RotatingFileHandler

import pytest

from voicegit.logging_config import (
    DRY_RUN_PREFIX,
    DryRunLoggerAdapter,
    get_dry_run_logger,
    get_logger,
    set_service_level,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_voicegit_logger():
    """Leave the voicegit logger as other tests expect it."""
    root_logger = logging.getLogger("voicegit")
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in root_logger.handlers:
        if handler not in handlers:
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


# =============================================================================
# Test setup_logging Function
# =============================================================================

class TestSetupLogging:
    """Unit tests for setup_logging function."""

    def test_setup_logging_default(self):
        """Test setup_logging with default parameters."""
        setup_logging()

        root_logger = logging.getLogger("voicegit")
        assert root_logger.level == logging.INFO
        assert len(root_logger.handlers) == 1

    def test_console_on_stderr(self):
        """Test console output goes to stderr so stdout holds only results."""
        setup_logging()

        handler = logging.getLogger("voicegit").handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is sys.stderr

    def test_setup_logging_custom_level(self):
        """Test setup_logging with custom log level."""
        setup_logging(log_level="debug")
        assert logging.getLogger("voicegit").level == logging.DEBUG

    def test_unknown_level_falls_back(self):
        """Test an unknown level name defaults to INFO."""
        setup_logging(log_level="LOUD")
        assert logging.getLogger("voicegit").level == logging.INFO

    def test_setup_logging_with_file(self, tmp_path):
        """Test setup_logging creates a rotating file handler."""
        log_path = tmp_path / "logs" / "voicegit.log"

        setup_logging(log_file=str(log_path))

        handlers = logging.getLogger("voicegit").handlers
        assert any(isinstance(h, RotatingFileHandler) for h in handlers)
        assert log_path.parent.exists()

    def test_repeated_setup_replaces_handlers(self):
        """Test calling setup twice does not duplicate output."""
        setup_logging()
        setup_logging()
        assert len(logging.getLogger("voicegit").handlers) == 1

    def test_verbose_console_format(self):
        """Test verbose console lines carry level and logger name."""
        setup_logging(verbose_console=True)
        handler = logging.getLogger("voicegit").handlers[0]
        assert "%(levelname)s" in handler.formatter._fmt

    def test_plain_console_format(self):
        setup_logging()
        handler = logging.getLogger("voicegit").handlers[0]
        assert handler.formatter._fmt == "%(message)s"

    def test_service_levels(self, caplog):
        """Test a service can log below the namespace level."""
        caplog.set_level(logging.DEBUG, logger="voicegit.services.storage")
        setup_logging(log_level="WARNING", service_levels={"storage": "debug"})

        logging.getLogger("voicegit.services.storage").debug("STORAGE_DETAIL")
        logging.getLogger("voicegit.orchestrator").info("HIDDEN")

        messages = [r.getMessage() for r in caplog.records]
        assert "STORAGE_DETAIL" in messages
        assert "HIDDEN" not in messages


# =============================================================================
# Test get_logger and set_service_level
# =============================================================================

class TestGetLogger:
    """Unit tests for get_logger function."""

    def test_prefixes_namespace(self):
        assert get_logger("orchestrator").name == "voicegit.orchestrator"

    def test_keeps_existing_namespace(self):
        assert get_logger("voicegit.config").name == "voicegit.config"


class TestSetServiceLevel:
    """Unit tests for set_service_level function."""

    def test_sets_service_logger(self):
        set_service_level("stt", "WARNING")
        assert logging.getLogger("voicegit.services.stt").level == logging.WARNING
        set_service_level("stt", "NOTSET_UNKNOWN")
        assert logging.getLogger("voicegit.services.stt").level == logging.INFO


# =============================================================================
# Test Dry-Run Logger
# =============================================================================

class TestDryRunLogger:
    """Unit tests for get_dry_run_logger and DryRunLoggerAdapter."""

    def test_plain_logger_when_live(self):
        log = get_dry_run_logger(False)
        assert isinstance(log, logging.Logger)
        assert log.name == "voicegit.commands"

    def test_adapter_when_dry_run(self):
        log = get_dry_run_logger(True, "voicegit.orchestrator")
        assert isinstance(log, DryRunLoggerAdapter)
        assert log.logger.name == "voicegit.orchestrator"

    def test_messages_prefixed(self, caplog):
        """Test dry-run messages are marked."""
        caplog.set_level(logging.INFO, logger="voicegit")

        get_dry_run_logger(True).info("AUDIO_SELECT_DRY_RUN: Would start | Path: %s", "/x")

        assert caplog.records[-1].getMessage() == f"{DRY_RUN_PREFIX}AUDIO_SELECT_DRY_RUN: Would start | Path: /x"
