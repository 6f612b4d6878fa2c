"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.
"""

from datetime import timedelta
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_DIGEST_ALGORITHMS = ["sha1", "sha256", "sha512"]


class SigningConfig(BaseModel):
    """Configuration for outgoing document signatures.

    Attributes:
        keystore_path: PKCS12 keystore or PEM certificate path
        key_path: PEM private key path (PEM certificates only)
        digest_algorithm: Digest algorithm (sha1, sha256, sha512)
        keystore_password_env_var: Environment variable holding the keystore password
    """

    keystore_path: Optional[Path] = None
    key_path: Optional[Path] = None
    digest_algorithm: str = Field(
        default="sha256",
        description="Digest algorithm: sha1 (legacy), sha256 or sha512"
    )
    keystore_password_env_var: Optional[str] = Field(
        default="SAML_SSO_KEYSTORE_PASSWORD",
        description="Environment variable for keystore password"
    )

    @field_validator("digest_algorithm")
    @classmethod
    def validate_digest_algorithm(cls, v: str) -> str:
        """Validate digest algorithm.

        Args:
            v: Digest algorithm name

        Returns:
            Validated digest algorithm (lowercase)

        Raises:
            ValueError: If digest algorithm is not one of: sha1, sha256, sha512
        """
        v_lower = v.lower()
        if v_lower not in VALID_DIGEST_ALGORITHMS:
            raise ValueError(
                f"Invalid digest_algorithm: {v}. "
                f"Must be one of: {', '.join(VALID_DIGEST_ALGORITHMS)}"
            )
        return v_lower


class VerificationConfig(BaseModel):
    """Configuration for incoming signature verification.

    Attributes:
        require_signature: Reject documents that carry no signature
        allow_legacy_sha1: Accept SHA-1 signature and digest methods
        idp_certificate: Base64 certificate of the trusted identity provider
    """

    require_signature: bool = Field(
        default=True,
        description="Reject unsigned SAML documents"
    )
    allow_legacy_sha1: bool = Field(
        default=False,
        description="Accept SHA-1 based signatures from legacy identity providers"
    )
    idp_certificate: Optional[str] = Field(
        default=None,
        description="Base64 X.509 certificate of the trusted identity provider"
    )


class CodecConfig(BaseModel):
    """Configuration for the HTTP-Redirect codec.

    Attributes:
        max_inflated_size: Upper limit on inflated payload size in bytes
    """

    max_inflated_size: int = Field(
        default=1024 * 1024,
        ge=1024,
        description="Maximum inflated message size in bytes"
    )


class RelayStateConfig(BaseModel):
    """Configuration for relay-state protection.

    Attributes:
        window_seconds: Replay window in seconds
        key_size: HMAC secret key length in bytes
    """

    window_seconds: int = Field(
        default=300,
        ge=1,
        description="Replay window in seconds"
    )
    key_size: int = Field(
        default=20,
        ge=16,
        description="HMAC secret key size in bytes"
    )

    @property
    def window(self) -> timedelta:
        """Replay window as a timedelta."""
        return timedelta(seconds=self.window_seconds)


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        redact_secrets: Whether to mask SAML payloads and signatures in logs
    """

    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_file: Path = Field(
        default=Path("logs/saml-sso.log"),
        description="Log file path"
    )
    redact_secrets: bool = Field(
        default=True,
        description="Redact SAML payloads, relay states and signatures from logs"
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level.

        Args:
            v: Log level string

        Returns:
            Validated log level (uppercase)

        Raises:
            ValueError: If log level is not valid
        """
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        return v_upper


class Config(BaseModel):
    """Root configuration model.

    Attributes:
        signing: Outgoing signature configuration
        verification: Incoming signature verification policy
        codec: HTTP-Redirect codec limits
        relay_state: Relay-state HMAC and replay window
        logging: Logging configuration

    Example:
        >>> config = Config(verification=VerificationConfig(require_signature=False))
        >>> config.verification.require_signature
        False
        >>> config.relay_state.window_seconds
        300
    """

    signing: SigningConfig = SigningConfig()
    verification: VerificationConfig = VerificationConfig()
    codec: CodecConfig = CodecConfig()
    relay_state: RelayStateConfig = RelayStateConfig()
    logging: LoggingConfig = LoggingConfig()
