"""Unit tests for configuration management."""

import json
import logging
from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from saml_sso_core.config import (
    CodecConfig,
    Config,
    LoggingConfig,
    RelayStateConfig,
    SigningConfig,
    get_keystore_password,
    get_logging_config,
    get_relay_state_config,
    get_verification_config,
    load_config,
)
from saml_sso_core.utils.exceptions import ConfigurationError


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a complete configuration file."""
    data = {
        "signing": {
            "keystore_path": "certs/sp.p12",
            "digest_algorithm": "SHA512",
        },
        "verification": {
            "require_signature": False,
            "allow_legacy_sha1": True,
            "idp_certificate": "MIIB",
        },
        "codec": {"max_inflated_size": 4096},
        "relay_state": {"window_seconds": 60, "key_size": 32},
        "logging": {"level": "debug", "log_file": "custom/sso.log", "redact_secrets": False},
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))
    return path


class TestConfigSchema:
    """Test pydantic configuration models."""

    def test_defaults(self):
        """Test every section has safe defaults."""
        # Act
        config = Config()

        # Assert
        assert config.signing.digest_algorithm == "sha256"
        assert config.signing.keystore_path is None
        assert config.verification.require_signature is True
        assert config.verification.allow_legacy_sha1 is False
        assert config.codec.max_inflated_size == 1024 * 1024
        assert config.relay_state.window == timedelta(minutes=5)
        assert config.relay_state.key_size == 20
        assert config.logging.level == "INFO"
        assert config.logging.redact_secrets is True

    def test_invalid_digest_algorithm(self):
        """Test unknown digests are rejected."""
        with pytest.raises(ValidationError, match="Invalid digest_algorithm"):
            SigningConfig(digest_algorithm="md5")

    def test_invalid_log_level(self):
        """Test unknown log levels are rejected."""
        with pytest.raises(ValidationError, match="Invalid log level"):
            LoggingConfig(level="VERBOSE")

    def test_max_inflated_size_lower_bound(self):
        """Test tiny inflate limits are rejected."""
        with pytest.raises(ValidationError):
            CodecConfig(max_inflated_size=10)

    def test_relay_state_bounds(self):
        """Test the window and key size lower bounds."""
        with pytest.raises(ValidationError):
            RelayStateConfig(window_seconds=0)
        with pytest.raises(ValidationError):
            RelayStateConfig(key_size=8)


class TestLoadConfig:
    """Test loading configuration from files and environment."""

    def test_load_config_file(self, config_file):
        """Test values are read from JSON and normalized."""
        # Act
        config = load_config(config_file)

        # Assert
        assert config.signing.keystore_path == Path("certs/sp.p12")
        assert config.signing.digest_algorithm == "sha512"
        assert config.verification.require_signature is False
        assert config.verification.allow_legacy_sha1 is True
        assert config.verification.idp_certificate == "MIIB"
        assert config.codec.max_inflated_size == 4096
        assert config.relay_state.window_seconds == 60
        assert config.logging.level == "DEBUG"
        assert config.logging.log_file == Path("custom/sso.log")
        assert config.logging.redact_secrets is False

    def test_missing_file_uses_defaults(self, tmp_path):
        """Test a missing file falls back to default configuration."""
        # Act
        config = load_config(tmp_path / "missing.json")

        # Assert
        assert config == Config()

    def test_invalid_json(self, tmp_path):
        """Test malformed JSON raises ConfigurationError."""
        # Arrange
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        # Act & Assert
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        """Test schema violations raise ConfigurationError."""
        # Arrange
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"signing": {"digest_algorithm": "md5"}}))

        # Act & Assert
        with pytest.raises(ConfigurationError, match="Configuration validation failed"):
            load_config(path)

    def test_env_overrides(self, config_file, monkeypatch):
        """Test SAML_SSO_* variables override file values."""
        # Arrange
        monkeypatch.setenv("SAML_SSO_DIGEST_ALGORITHM", "sha1")
        monkeypatch.setenv("SAML_SSO_REQUIRE_SIGNATURE", "true")
        monkeypatch.setenv("SAML_SSO_ALLOW_LEGACY_SHA1", "no")
        monkeypatch.setenv("SAML_SSO_IDP_CERTIFICATE", "MIIC")
        monkeypatch.setenv("SAML_SSO_MAX_INFLATED_SIZE", "2048")
        monkeypatch.setenv("SAML_SSO_RELAY_STATE_WINDOW", "120")
        monkeypatch.setenv("SAML_SSO_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("SAML_SSO_KEY_PATH", "certs/sp-key.pem")

        # Act
        config = load_config(config_file)

        # Assert
        assert config.signing.digest_algorithm == "sha1"
        assert config.signing.key_path == Path("certs/sp-key.pem")
        assert config.verification.require_signature is True
        assert config.verification.allow_legacy_sha1 is False
        assert config.verification.idp_certificate == "MIIC"
        assert config.codec.max_inflated_size == 2048
        assert config.relay_state.window_seconds == 120
        assert config.logging.level == "WARNING"

    def test_password_in_file_warns(self, tmp_path, caplog):
        """Test a keystore password in the config file is flagged."""
        # Arrange
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"signing": {"keystore_password": "secret"}}))

        # Act
        with caplog.at_level(logging.WARNING):
            load_config(path)

        # Assert
        assert "Keystore password found in configuration file" in caplog.text


class TestConfigHelpers:
    """Test configuration accessors."""

    def test_get_keystore_password(self, monkeypatch):
        """Test the password is read from the configured variable."""
        # Arrange
        monkeypatch.setenv("SAML_SSO_KEYSTORE_PASSWORD", "changeit")

        # Act & Assert
        assert get_keystore_password(Config()) == b"changeit"

    def test_get_keystore_password_unset(self):
        """Test None when the variable is not set."""
        assert get_keystore_password(Config()) is None

    def test_get_keystore_password_custom_variable(self, monkeypatch):
        """Test a custom environment variable name."""
        # Arrange
        monkeypatch.setenv("MY_P12_PASSWORD", "pw")
        config = Config(signing=SigningConfig(keystore_password_env_var="MY_P12_PASSWORD"))

        # Act & Assert
        assert get_keystore_password(config) == b"pw"

    def test_section_accessors(self):
        """Test section helpers return the nested models."""
        config = Config()

        assert get_verification_config(config) is config.verification
        assert get_relay_state_config(config) is config.relay_state
        assert get_logging_config(config) is config.logging
