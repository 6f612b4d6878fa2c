"""Data models for SAML signing, trust material and relay state.

This module defines dataclasses for certificate metadata, the tagged signing
key variant resolved once at key-load time, the HMAC secret key, and the
timestamped relay-state record.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import dsa, rsa


@dataclass
class CertificateInfo:
    """Certificate information for display and logging.

    Contains extracted metadata from X.509 certificates without
    exposing sensitive key material.

    Attributes:
        subject: Certificate subject Distinguished Name (DN)
        issuer: Certificate issuer Distinguished Name (DN)
        not_before: Certificate validity start date
        not_after: Certificate expiration date
        serial_number: Certificate serial number
        key_size: Public key size in bits (e.g., 2048, 4096)
    """

    subject: str
    issuer: str
    not_before: datetime
    not_after: datetime
    serial_number: int
    key_size: Optional[int]


@dataclass(frozen=True)
class RsaSigningKey:
    """RSA private key paired with the certificate that publishes it.

    Attributes:
        private_key: RSA private key
        certificate: X.509 certificate carrying the matching public key
    """

    private_key: rsa.RSAPrivateKey = field(repr=False)
    certificate: x509.Certificate


@dataclass(frozen=True)
class DsaSigningKey:
    """DSA private key paired with the certificate that publishes it.

    Attributes:
        private_key: DSA private key
        certificate: X.509 certificate carrying the matching public key
    """

    private_key: dsa.DSAPrivateKey = field(repr=False)
    certificate: x509.Certificate


SigningKey = Union[RsaSigningKey, DsaSigningKey]


@dataclass(frozen=True)
class SecretKey:
    """Random key material for relay-state HMACs.

    Immutable once generated, so one instance can be shared read-only
    across threads for the lifetime of its owning server or session.

    Attributes:
        material: Raw key bytes (never derived from user input)
        algorithm: HMAC algorithm name
    """

    material: bytes = field(repr=False)
    algorithm: str = "HmacSHA1"


@dataclass(frozen=True)
class RelayRecord:
    """Relay-state value accepted at a given instant.

    Attributes:
        value: Opaque relay-state token
        issued_at: Timezone-aware timestamp of issue
    """

    value: str
    issued_at: datetime
