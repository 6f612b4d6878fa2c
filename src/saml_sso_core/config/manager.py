"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading and management functionality,
including support for JSON configuration files, environment variable overrides,
and configuration validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from saml_sso_core.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from saml_sso_core.config.schema import Config, LoggingConfig, RelayStateConfig, VerificationConfig
from saml_sso_core.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "SAML_SSO_"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (SAML_SSO_* prefix)
    3. Configuration file (JSON)
    4. Default values

    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> config.verification.require_signature
        True
    """
    # Load .env file if present in project root
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)

    config_dict = _load_config_file(config_path)
    config_dict = _apply_env_overrides(config_dict)
    _check_sensitive_values(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format."
        ) from e


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If JSON is malformed
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
            logger.info(f"Loaded configuration from {config_path}")
            return config_dict
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            ) from e
    else:
        logger.info(
            f"Config file not found: {config_path}. Using default configuration."
        )
        # Return a deep copy of defaults to avoid mutation
        return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with SAML_SSO_ prefix.

    Environment variables follow the pattern: SAML_SSO_<FIELD>
    For example: SAML_SSO_REQUIRE_SIGNATURE, SAML_SSO_LOG_LEVEL

    Args:
        config_dict: Configuration dictionary to update

    Returns:
        Updated configuration dictionary with environment overrides applied
    """
    # Signing section
    if keystore_path := os.getenv(f"{ENV_PREFIX}KEYSTORE_PATH"):
        config_dict.setdefault("signing", {})["keystore_path"] = keystore_path
        logger.debug("Override: keystore_path from environment")

    if key_path := os.getenv(f"{ENV_PREFIX}KEY_PATH"):
        config_dict.setdefault("signing", {})["key_path"] = key_path
        logger.debug("Override: key_path from environment")

    if digest_algorithm := os.getenv(f"{ENV_PREFIX}DIGEST_ALGORITHM"):
        config_dict.setdefault("signing", {})["digest_algorithm"] = digest_algorithm
        logger.debug("Override: digest_algorithm from environment")

    # Verification section
    if require_signature := os.getenv(f"{ENV_PREFIX}REQUIRE_SIGNATURE"):
        config_dict.setdefault("verification", {})["require_signature"] = _parse_bool(
            require_signature
        )
        logger.debug("Override: require_signature from environment")

    if allow_legacy_sha1 := os.getenv(f"{ENV_PREFIX}ALLOW_LEGACY_SHA1"):
        config_dict.setdefault("verification", {})["allow_legacy_sha1"] = _parse_bool(
            allow_legacy_sha1
        )
        logger.debug("Override: allow_legacy_sha1 from environment")

    if idp_certificate := os.getenv(f"{ENV_PREFIX}IDP_CERTIFICATE"):
        config_dict.setdefault("verification", {})["idp_certificate"] = idp_certificate
        logger.debug("Override: idp_certificate from environment")

    # Codec section
    if max_inflated_size := os.getenv(f"{ENV_PREFIX}MAX_INFLATED_SIZE"):
        config_dict.setdefault("codec", {})["max_inflated_size"] = int(max_inflated_size)
        logger.debug("Override: max_inflated_size from environment")

    # Relay state section
    if window_seconds := os.getenv(f"{ENV_PREFIX}RELAY_STATE_WINDOW"):
        config_dict.setdefault("relay_state", {})["window_seconds"] = int(window_seconds)
        logger.debug("Override: relay_state window_seconds from environment")

    # Logging section
    if log_level := os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config_dict.setdefault("logging", {})["level"] = log_level
        logger.debug("Override: log_level from environment")

    if log_file := os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config_dict.setdefault("logging", {})["log_file"] = log_file
        logger.debug("Override: log_file from environment")

    if redact_secrets := os.getenv(f"{ENV_PREFIX}REDACT_SECRETS"):
        config_dict.setdefault("logging", {})["redact_secrets"] = _parse_bool(redact_secrets)
        logger.debug("Override: redact_secrets from environment")

    return config_dict


def _parse_bool(value: str) -> bool:
    """Parse boolean value from string.

    Args:
        value: String value to parse (case-insensitive)

    Returns:
        Boolean value
    """
    return value.lower() in ("true", "1", "yes", "on")


def _check_sensitive_values(config_dict: dict[str, Any]) -> None:
    """Warn when a keystore password was written into the configuration file.

    Args:
        config_dict: Configuration dictionary to check
    """
    signing = config_dict.get("signing", {})
    if "keystore_password" in signing:
        logger.warning(
            "WARNING: Keystore password found in configuration file! "
            "Passwords should be stored in environment variables, not config files. "
            f"Use {ENV_PREFIX}KEYSTORE_PASSWORD environment variable instead."
        )


def get_keystore_password(config: Config) -> Optional[bytes]:
    """Read the keystore password from the configured environment variable.

    Args:
        config: Configuration instance

    Returns:
        Password bytes, or None if the variable is unset
    """
    env_var = config.signing.keystore_password_env_var
    if not env_var:
        return None
    password = os.getenv(env_var)
    return password.encode("utf-8") if password else None


def get_verification_config(config: Config) -> VerificationConfig:
    """Get signature verification policy."""
    return config.verification


def get_relay_state_config(config: Config) -> RelayStateConfig:
    """Get relay-state configuration."""
    return config.relay_state


def get_logging_config(config: Config) -> LoggingConfig:
    """Get logging configuration.

    Args:
        config: Configuration instance

    Returns:
        LoggingConfig instance
    """
    return config.logging
