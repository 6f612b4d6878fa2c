"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from typing import Any

# Default configuration dictionary
# This is used as a fallback when no configuration file is present
DEFAULT_CONFIG: dict[str, Any] = {
    "signing": {
        # No default key material - must be provided by user
        "keystore_path": None,
        "key_path": None,
        # SHA-256 unless a legacy identity provider needs sha1
        "digest_algorithm": "sha256",
        "keystore_password_env_var": "SAML_SSO_KEYSTORE_PASSWORD",
    },
    "verification": {
        # Unsigned documents are rejected unless explicitly allowed
        "require_signature": True,
        "allow_legacy_sha1": False,
        "idp_certificate": None,
    },
    "codec": {
        # 1 MiB ceiling on inflated HTTP-Redirect payloads
        "max_inflated_size": 1024 * 1024,
    },
    "relay_state": {
        # Replay window: 5 minutes
        "window_seconds": 300,
        # 20 random bytes per HMAC key
        "key_size": 20,
    },
    "logging": {
        "level": "INFO",
        "log_file": "logs/saml-sso.log",
        # Mask SAML payloads, relay states and signatures in logs
        "redact_secrets": True,
    },
}

# Default configuration file path
DEFAULT_CONFIG_PATH = "config/config.json"
