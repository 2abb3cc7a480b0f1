"""Tests for configuration loading."""

import pytest

from authstore.common.config import (
    AuthStoreConfig,
    HashConfig,
    StoreConfig,
    load_config,
    load_typed_config,
    parse_config,
    parse_hash_config,
    parse_logging_config,
    parse_store_config,
)


class TestStoreConfig:
    """Tests for StoreConfig parsing."""

    def test_defaults(self):
        """Test default store settings."""
        config = parse_store_config({})

        assert config == StoreConfig()
        assert config.type == "xml"
        assert config.path == "/var/lib/authstore/security.xml"

    def test_path_follows_type(self):
        """Test that the default path matches the store type."""
        assert parse_store_config({"type": "yaml"}).path == "/var/lib/authstore/security.yaml"
        assert parse_store_config({"type": "memory"}).path == ""

    def test_explicit_path(self):
        """Test an explicit store path."""
        config = parse_store_config({"type": "xml", "path": "/srv/security.xml"})

        assert config.path == "/srv/security.xml"


class TestHashConfig:
    """Tests for HashConfig parsing."""

    def test_defaults(self):
        """Test default hash settings."""
        assert parse_hash_config({}) == HashConfig()

    def test_schemes_as_string(self):
        """Test a comma separated scheme list."""
        config = parse_hash_config({"schemes": "pbkdf2_sha256, sha256_crypt"})

        assert config.schemes == ["pbkdf2_sha256", "sha256_crypt"]

    def test_disabled(self):
        """Test disabling hashing."""
        assert not parse_hash_config({"enabled": False}).enabled


class TestLoggingConfig:
    """Tests for LoggingConfig parsing."""

    def test_values(self):
        """Test explicit logging settings."""
        config = parse_logging_config(
            {"level": "DEBUG", "log_dir": "/tmp/logs", "file_logging": True}
        )

        assert config.level == "DEBUG"
        assert config.log_dir == "/tmp/logs"
        assert config.file_logging
        assert config.console_logging


class TestLoadConfig:
    """Tests for loading configuration files."""

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path):
        """Test that an empty file yields defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(str(path)) == {}
        assert load_typed_config(str(path)) == AuthStoreConfig()

    def test_non_mapping_root(self, tmp_path):
        """Test that a list document is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("- store\n")

        with pytest.raises(TypeError):
            load_config(str(path))

    def test_env_expansion(self, tmp_path, monkeypatch):
        """Test that environment variables are expanded."""
        monkeypatch.setenv("AUTHSTORE_DATA", "/data")
        path = tmp_path / "config.yaml"
        path.write_text("store:\n  type: yaml\n  path: ${AUTHSTORE_DATA}/security.yaml\n")

        config = load_typed_config(str(path))

        assert config.store == StoreConfig(type="yaml", path="/data/security.yaml")

    def test_full_config(self, tmp_path):
        """Test a complete configuration file."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "store:\n"
            "  type: memory\n"
            "hash:\n"
            "  enabled: true\n"
            "  schemes: [pbkdf2_sha256]\n"
            "logging:\n"
            "  level: WARNING\n"
            "  console_logging: false\n"
        )

        config = load_typed_config(str(path))

        assert config.store.type == "memory"
        assert config.hash.schemes == ["pbkdf2_sha256"]
        assert config.logging.level == "WARNING"
        assert not config.logging.console_logging

    def test_null_sections(self):
        """Test that empty sections fall back to defaults."""
        assert parse_config({"store": None, "hash": None}) == AuthStoreConfig()
