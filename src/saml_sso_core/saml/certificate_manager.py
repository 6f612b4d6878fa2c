"""Certificate management module for trust material and signing keys.

This module parses the counterparty's X.509 certificate from the base64 string
found in configuration or metadata, exposes its public key, and loads this
party's own signing key material from a PKCS12 keystore or PEM files. Key
material is resolved once into the tagged RsaSigningKey/DsaSigningKey variant.
"""

import base64
import binascii
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Tuple

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dsa, rsa
from cryptography.hazmat.primitives.serialization import Encoding, pkcs12

from ..models.saml import CertificateInfo, DsaSigningKey, RsaSigningKey, SigningKey
from ..utils.exceptions import CertificateParseError, KeyMaterialError, SigningError

logger = logging.getLogger(__name__)

PEM_DELIMITERS = re.compile(r"-----(BEGIN|END) CERTIFICATE-----")
WHITESPACE = re.compile(r"\s+")


def clean_x509_string(x509_string: str) -> str:
    """Strip PEM delimiters, spaces and newlines from a certificate string.

    Args:
        x509_string: Base64 certificate body, optionally PEM framed

    Returns:
        Base64 text with no whitespace
    """
    return WHITESPACE.sub("", PEM_DELIMITERS.sub("", x509_string))


@lru_cache(maxsize=64)
def _load_der_certificate(cleaned: str) -> x509.Certificate:
    try:
        der = base64.b64decode(cleaned.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise CertificateParseError(f"Certificate is not valid base64: {e}") from e

    try:
        return x509.load_der_x509_certificate(der)
    except ValueError as e:
        raise CertificateParseError(
            f"Failed to parse X.509 certificate: {e}. "
            f"Ensure the value is the base64 body of a DER certificate."
        ) from e


def parse_certificate(x509_string: str) -> x509.Certificate:
    """Parse a base64 X.509 certificate string.

    Whitespace and newlines are tolerated and stripped. Parsed certificates
    are cached by their normalized text, since the source string is static
    per relying party.

    Args:
        x509_string: Base64 DER certificate, the body of a PEM block

    Returns:
        Parsed X.509 certificate

    Raises:
        CertificateParseError: If the input is empty, not base64 or not DER

    Example:
        >>> cert = parse_certificate(idp_certificate_b64)
        >>> key = public_key(cert)
    """
    if not x509_string or not x509_string.strip():
        raise CertificateParseError("Certificate string is empty")

    cert = _load_der_certificate(clean_x509_string(x509_string))
    logger.debug(f"Parsed certificate: {cert.subject.rfc4514_string()}")
    return cert


def public_key(certificate: Optional[x509.Certificate]) -> Any:
    """Return the public key of a certificate.

    Raises:
        CertificateParseError: If no certificate is supplied
    """
    if certificate is None:
        raise CertificateParseError("No certificate supplied to extract a public key from")
    return certificate.public_key()


def certificate_to_base64(certificate: x509.Certificate) -> str:
    """Encode a certificate as base64 DER, the format parse_certificate reads."""
    return base64.b64encode(certificate.public_bytes(Encoding.DER)).decode("ascii")


def clear_certificate_cache() -> None:
    """Clear all cached certificates."""
    _load_der_certificate.cache_clear()


def get_certificate_info(cert: x509.Certificate) -> CertificateInfo:
    """Extract certificate information for display and logging.

    Args:
        cert: X.509 certificate

    Returns:
        CertificateInfo dataclass with certificate details
    """
    key = cert.public_key()
    key_size = key.key_size if hasattr(key, "key_size") else None

    return CertificateInfo(
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
        serial_number=cert.serial_number,
        key_size=key_size,
    )


def signing_key_from(private_key: Any, certificate: Optional[x509.Certificate]) -> SigningKey:
    """Resolve a private key and certificate into the tagged signing key variant.

    Args:
        private_key: Private key loaded by the key provider
        certificate: Certificate publishing the matching public key

    Returns:
        RsaSigningKey or DsaSigningKey

    Raises:
        SigningError: If either half is missing or the key is neither RSA nor DSA
    """
    if private_key is None or certificate is None:
        raise SigningError(
            "Signing requires both a private key and a certificate. "
            "Check the keystore contents."
        )

    if isinstance(private_key, rsa.RSAPrivateKey):
        return RsaSigningKey(private_key=private_key, certificate=certificate)
    if isinstance(private_key, dsa.DSAPrivateKey):
        return DsaSigningKey(private_key=private_key, certificate=certificate)

    raise SigningError(
        f"Unsupported private key type: {type(private_key).__name__}. "
        f"Only RSA and DSA keys can sign SAML documents."
    )


def _read_file(path: Path) -> bytes:
    if not path.exists():
        raise KeyMaterialError(
            f"Key material file not found: {path}. "
            f"Ensure the file exists and path is correct."
        )
    with open(path, "rb") as f:
        return f.read()


def load_pkcs12_key_material(
    p12_path: Path, password: Optional[bytes] = None
) -> Tuple[Any, x509.Certificate]:
    """Load a private key and certificate from a PKCS12 keystore.

    Args:
        p12_path: Path to PKCS12 (.p12 or .pfx) file
        password: Password for the keystore

    Returns:
        Tuple of (private_key, certificate)

    Raises:
        KeyMaterialError: If the keystore cannot be read or is incomplete
    """
    data = _read_file(p12_path)

    try:
        private_key, certificate, _ = pkcs12.load_key_and_certificates(data, password)
    except (TypeError, ValueError) as e:
        raise KeyMaterialError(
            f"Failed to load PKCS12 from {p12_path}: {e}. "
            f"Ensure file is valid PKCS12 format and password is correct."
        ) from e

    if certificate is None:
        raise KeyMaterialError(f"No certificate found in PKCS12 file: {p12_path}")
    if private_key is None:
        raise KeyMaterialError(f"No private key found in PKCS12 file: {p12_path}")

    logger.info(f"Loaded PKCS12 key material: {certificate.subject.rfc4514_string()}")
    return private_key, certificate


def load_pem_key_material(
    cert_path: Path, key_path: Path, password: Optional[bytes] = None
) -> Tuple[Any, x509.Certificate]:
    """Load a PEM certificate and PEM private key.

    Raises:
        KeyMaterialError: If either file is missing or unreadable
    """
    cert_data = _read_file(cert_path)
    key_data = _read_file(key_path)

    try:
        certificate = x509.load_pem_x509_certificate(cert_data)
    except ValueError as e:
        raise KeyMaterialError(f"Failed to load PEM certificate from {cert_path}: {e}") from e

    try:
        private_key = serialization.load_pem_private_key(key_data, password=password)
    except TypeError as e:
        raise KeyMaterialError(
            f"Failed to load private key from {key_path}: Incorrect password. "
            f"If key is encrypted, provide correct password."
        ) from e
    except ValueError as e:
        raise KeyMaterialError(f"Failed to load PEM private key from {key_path}: {e}") from e

    # Never log private key contents
    logger.info(f"Loaded PEM key material: {certificate.subject.rfc4514_string()}")
    return private_key, certificate


def load_key_material(
    path: Path,
    password: Optional[bytes] = None,
    key_path: Optional[Path] = None,
) -> SigningKey:
    """Load signing key material with format detection by file extension.

    Args:
        path: PKCS12 keystore (.p12/.pfx) or PEM certificate (.pem/.crt)
        password: Keystore or private key password
        key_path: PEM private key, required for PEM certificates

    Returns:
        RsaSigningKey or DsaSigningKey

    Raises:
        KeyMaterialError: If the files cannot be loaded
        SigningError: If the key type is unsupported

    Example:
        >>> signing_key = load_key_material(Path("certs/sp.p12"), password=b"secret")
    """
    suffix = path.suffix.lower()

    if suffix in (".p12", ".pfx"):
        private_key, certificate = load_pkcs12_key_material(path, password)
    elif suffix in (".pem", ".crt"):
        if key_path is None:
            raise KeyMaterialError(
                f"PEM certificate {path} needs a separate private key file. "
                f"Provide key_path."
            )
        private_key, certificate = load_pem_key_material(path, key_path, password)
    else:
        raise KeyMaterialError(
            f"Unsupported key material format: {suffix}. "
            f"Supported formats: .p12, .pfx, .pem, .crt"
        )

    return signing_key_from(private_key, certificate)
