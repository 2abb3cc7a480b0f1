"""Common utilities for authstore."""

from .logger import setup_logger, get_logger
from .config import AuthStoreConfig, load_config, load_typed_config, parse_config

__all__ = [
    "AuthStoreConfig",
    "get_logger",
    "load_config",
    "load_typed_config",
    "parse_config",
    "setup_logger",
]
