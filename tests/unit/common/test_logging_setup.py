"""Tests for logging setup."""

import logging

import pytest

from authstore.common.logger import get_logger, setup_logger


@pytest.fixture
def logger_name(request):
    """Unique logger name, handlers removed afterwards."""
    name = f"test.{request.node.name}"
    yield name

    logger = get_logger(name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


class TestLogger:
    """Tests for the package loggers."""

    def test_namespace(self):
        """Test that loggers live under the package namespace."""
        assert get_logger("storage").name == "authstore.storage"
        assert get_logger("authstore.model").name == "authstore.model"
        assert get_logger("authstore").name == "authstore"

    def test_level(self, logger_name):
        """Test setting the level."""
        logger = setup_logger(name=logger_name, level="debug")

        assert logger.level == logging.DEBUG

    def test_invalid_level(self, logger_name):
        """Test that an unknown level is rejected."""
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logger(name=logger_name, level="LOUD")

    def test_no_duplicate_handlers(self, logger_name):
        """Test that repeated setup keeps a single console handler."""
        setup_logger(name=logger_name)
        logger = setup_logger(name=logger_name)

        assert len(logger.handlers) == 1

    def test_file_logging(self, logger_name, tmp_path):
        """Test writing to a log file."""
        logger = setup_logger(
            name=logger_name,
            log_dir=str(tmp_path / "logs"),
            file_logging=True,
            console_logging=False,
        )
        logger.info("hello file")
        for handler in logger.handlers:
            handler.flush()

        log_file = tmp_path / "logs" / f"{logger_name.split('.')[-1]}.log"
        content = log_file.read_text()
        assert "[INFO]" in content
        assert "hello file" in content

    def test_file_rotation(self, logger_name, tmp_path):
        """Test the rotation limits of the file handler."""
        logger = setup_logger(
            name=logger_name,
            log_dir=str(tmp_path),
            file_logging=True,
            console_logging=False,
        )

        handler = logger.handlers[0]
        assert handler.maxBytes == 10 * 1024 * 1024
        assert handler.backupCount == 5
