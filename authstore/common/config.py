"""Configuration management for authstore.

Handles loading of YAML configuration files into typed settings for the
store adapter, the password hash and logging.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml


DEFAULT_STORE_PATHS = {
    "xml": "/var/lib/authstore/security.xml",
    "yaml": "/var/lib/authstore/security.yaml",
    "memory": "",
}


@dataclass
class StoreConfig:
    """Configuration for the backing store adapter."""

    type: str = "xml"
    path: str = DEFAULT_STORE_PATHS["xml"]


@dataclass
class HashConfig:
    """Configuration for password hashing."""

    enabled: bool = True
    schemes: List[str] = field(default_factory=lambda: ["pbkdf2_sha256"])
    deprecated: str = "auto"


@dataclass
class LoggingConfig:
    """Configuration for package logging."""

    level: str = "INFO"
    log_dir: str = "/var/log/authstore"
    file_logging: bool = False
    console_logging: bool = True


@dataclass
class AuthStoreConfig:
    """Top-level configuration for authstore."""

    store: StoreConfig = field(default_factory=StoreConfig)
    hash: HashConfig = field(default_factory=HashConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def parse_store_config(store_dict: Dict[str, Any]) -> StoreConfig:
    """Parse a store configuration dictionary.

    The path defaults to the conventional location of the selected store type.

    Args:
        store_dict: Store configuration dictionary

    Returns:
        StoreConfig instance
    """
    store_type = store_dict.get("type", "xml")

    return StoreConfig(
        type=store_type,
        path=store_dict.get("path", DEFAULT_STORE_PATHS.get(store_type, "")),
    )


def parse_hash_config(hash_dict: Dict[str, Any]) -> HashConfig:
    """Parse a hash configuration dictionary.

    Args:
        hash_dict: Hash configuration dictionary

    Returns:
        HashConfig instance
    """
    schemes = hash_dict.get("schemes", ["pbkdf2_sha256"])
    if isinstance(schemes, str):
        schemes = [scheme.strip() for scheme in schemes.split(",") if scheme.strip()]

    return HashConfig(
        enabled=hash_dict.get("enabled", True),
        schemes=list(schemes),
        deprecated=hash_dict.get("deprecated", "auto"),
    )


def parse_logging_config(logging_dict: Dict[str, Any]) -> LoggingConfig:
    """Parse a logging configuration dictionary.

    Args:
        logging_dict: Logging configuration dictionary

    Returns:
        LoggingConfig instance
    """
    return LoggingConfig(
        level=logging_dict.get("level", "INFO"),
        log_dir=logging_dict.get("log_dir", "/var/log/authstore"),
        file_logging=logging_dict.get("file_logging", False),
        console_logging=logging_dict.get("console_logging", True),
    )


def parse_config(config_dict: Dict[str, Any]) -> AuthStoreConfig:
    """Parse the full configuration dictionary.

    Args:
        config_dict: Full configuration dictionary

    Returns:
        AuthStoreConfig instance
    """
    return AuthStoreConfig(
        store=parse_store_config(config_dict.get("store") or {}),
        hash=parse_hash_config(config_dict.get("hash") or {}),
        logging=parse_logging_config(config_dict.get("logging") or {}),
    )


def load_config(config_path: str = "/etc/authstore/config.yaml") -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        TypeError: If the document root is not a mapping
        yaml.YAMLError: If config file is invalid YAML
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_file.open("r") as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    if not isinstance(config, dict):
        raise TypeError(
            f"Configuration root must be a mapping, got {type(config).__name__}"
        )

    return _expand_env_vars(config)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in configuration.

    Args:
        obj: Configuration object (dict, list, str, etc.)

    Returns:
        Configuration with expanded environment variables
    """
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return os.path.expandvars(obj)
    else:
        return obj


def load_typed_config(
    config_path: str = "/etc/authstore/config.yaml",
) -> AuthStoreConfig:
    """Load and parse configuration into typed dataclasses.

    Args:
        config_path: Path to configuration file

    Returns:
        AuthStoreConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    return parse_config(load_config(config_path))
