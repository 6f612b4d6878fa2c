"""Config module.

This module provides configuration management functionality.
"""

from saml_sso_core.config.manager import (
    get_keystore_password,
    get_logging_config,
    get_relay_state_config,
    get_verification_config,
    load_config,
)
from saml_sso_core.config.schema import (
    CodecConfig,
    Config,
    LoggingConfig,
    RelayStateConfig,
    SigningConfig,
    VerificationConfig,
)

__all__ = [
    # Main configuration loading
    "load_config",
    # Helper functions
    "get_keystore_password",
    "get_verification_config",
    "get_relay_state_config",
    "get_logging_config",
    # Configuration models
    "Config",
    "SigningConfig",
    "VerificationConfig",
    "CodecConfig",
    "RelayStateConfig",
    "LoggingConfig",
]
