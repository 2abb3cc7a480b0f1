"""Logging infrastructure for authstore.

Provides centralized logging configuration with console output, optional
rotating file output and ISO 8601 timestamps. All package loggers live under
the ``authstore`` namespace so embedding applications can tune them at once.
"""

import logging
import logging.handlers
import os

ROOT_LOGGER_NAME = "authstore"
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _qualify(name: str) -> str:
    """Place a logger name under the package namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return name
    return f"{ROOT_LOGGER_NAME}.{name}"


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str = "INFO",
    log_dir: str = "/var/log/authstore",
    file_logging: bool = False,
    console_logging: bool = True,
) -> logging.Logger:
    """Configure a package logger once.

    The file handler rotates ``<log_dir>/<last name part>.log`` at 10MB and
    keeps five backups.

    Raises:
        ValueError: If the level is not a known logging level
    """
    logger = logging.getLogger(_qualify(name))

    if level.upper() not in LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of: {', '.join(LEVELS)}")
    logger.setLevel(level.upper())

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if file_logging:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, f"{name.split('.')[-1]}.log"),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console_logging:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a package logger by name.

    Args:
        name: Logger name, relative to the ``authstore`` namespace

    Returns:
        Logger instance
    """
    return logging.getLogger(_qualify(name))
