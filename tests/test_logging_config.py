"""Tests for logging_config.py utility functions."""

import os
import logging
from unittest.mock import patch

from thumbnails_pipeline.core.logging_config import (
    DEFAULT_LOGGER_NAME,
    get_logger,
    resolve_level,
    set_debug,
    setup_logger,
)


class TestSetupLogger:
    """Tests for setup_logger function."""

    def test_setup_logger_default_parameters(self):
        """Test setup_logger with default parameters."""
        with patch.dict(os.environ, {"LOG_LEVEL": "INFO"}):
            test_logger = setup_logger()
        assert test_logger.name == "thumbnails-pipeline"
        assert test_logger.level == logging.INFO
        assert len(test_logger.handlers) == 1
        assert not test_logger.propagate

    def test_setup_logger_custom_level_by_parameter(self):
        """Test setup_logger with custom level via parameter."""
        test_logger = setup_logger(name="test-param-level", level="DEBUG")
        assert test_logger.level == logging.DEBUG

    def test_setup_logger_custom_level_by_env_var(self):
        """Test setup_logger with custom level via environment variable."""
        with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}):
            test_logger = setup_logger(name="test-env-level")
            assert test_logger.level == logging.WARNING

    def test_setup_logger_invalid_level_defaults_to_info(self):
        """Test setup_logger with invalid level defaults to INFO."""
        test_logger = setup_logger(name="test-invalid-level", level="INVALID_LEVEL")
        assert test_logger.level == logging.INFO

    def test_setup_logger_structured_format(self):
        """Test setup_logger with structured format."""
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("LOG_FORMAT", None)
            test_logger = setup_logger(name="test-structured", format_type="structured")
        format_string = test_logger.handlers[0].formatter._fmt

        assert "%(filename)s" in format_string
        assert "%(lineno)d" in format_string
        assert "%(funcName)s" in format_string

    def test_setup_logger_simple_format_by_env_var(self):
        """Test LOG_FORMAT=simple selects the simple formatter."""
        with patch.dict(os.environ, {"LOG_FORMAT": "simple"}):
            test_logger = setup_logger(name="test-simple-env")
        format_string = test_logger.handlers[0].formatter._fmt

        assert "%(filename)s" not in format_string
        assert "%(levelname)s" in format_string

    def test_setup_logger_no_duplicate_handlers(self):
        """Test that repeated setup does not stack handlers."""
        first = setup_logger(name="test-no-duplicates")
        second = setup_logger(name="test-no-duplicates")

        assert first is second
        assert len(second.handlers) == 1


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_namespaces_children(self):
        assert get_logger("handler").name == f"{DEFAULT_LOGGER_NAME}.handler"

    def test_get_logger_keeps_qualified_names(self):
        assert get_logger(f"{DEFAULT_LOGGER_NAME}.gateway").name == f"{DEFAULT_LOGGER_NAME}.gateway"
        assert get_logger().name == DEFAULT_LOGGER_NAME


class TestLevels:
    """Tests for level helpers."""

    def test_resolve_level(self):
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level("nonsense") == logging.INFO

    def test_set_debug_toggles_package_loggers(self):
        child = get_logger("debug-toggle")
        with patch.dict(os.environ, {"LOG_LEVEL": "INFO"}):
            set_debug(True)
            assert child.level == logging.DEBUG
            assert logging.getLogger(DEFAULT_LOGGER_NAME).level == logging.DEBUG

            set_debug(False)
            assert child.level == logging.INFO
