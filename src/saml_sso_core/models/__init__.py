"""Models module.

This module provides data models and dataclasses for the application.
"""

from saml_sso_core.models.saml import (
    CertificateInfo,
    DsaSigningKey,
    RelayRecord,
    RsaSigningKey,
    SecretKey,
    SigningKey,
)

__all__ = [
    "CertificateInfo",
    "DsaSigningKey",
    "RelayRecord",
    "RsaSigningKey",
    "SecretKey",
    "SigningKey",
]
