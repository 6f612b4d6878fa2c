"""
Shared pytest configuration and fixtures.

Key material is generated once per session with the cryptography library,
so no certificate files need to be checked in. Self-signed certificates carry
SubjectKeyIdentifier and AuthorityKeyIdentifier extensions for signxml.
"""

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import dsa, rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from saml_sso_core.models.saml import DsaSigningKey, RsaSigningKey
from saml_sso_core.saml.certificate_manager import certificate_to_base64, clear_certificate_cache

KEYSTORE_PASSWORD = b"testpass"

UNSIGNED_RESPONSE = (
    '<samlp:Response xmlns:samlp="urn:oasis:names:tc:SAML:2.0:protocol" '
    'xmlns:saml="urn:oasis:names:tc:SAML:2.0:assertion" '
    'ID="_resp-1" Version="2.0" IssueInstant="2024-01-02T03:04:05Z">'
    "<saml:Issuer>https://idp.example.com</saml:Issuer>"
    "<samlp:Status>"
    '<samlp:StatusCode Value="urn:oasis:names:tc:SAML:2.0:status:Success"/>'
    "</samlp:Status>"
    "<saml:Assertion>"
    "<saml:Subject><saml:NameID>user@example.com</saml:NameID></saml:Subject>"
    "</saml:Assertion>"
    "</samlp:Response>"
)


def _self_signed_certificate(private_key: Any, common_name: str) -> x509.Certificate:
    subject = issuer = x509.Name([
        x509.NameAttribute(NameOID.COUNTRY_NAME, "US"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "TestOrg"),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])
    now = datetime.now(timezone.utc)

    return x509.CertificateBuilder().subject_name(
        subject
    ).issuer_name(
        issuer
    ).public_key(
        private_key.public_key()
    ).serial_number(
        x509.random_serial_number()
    ).not_valid_before(
        now - timedelta(days=1)
    ).not_valid_after(
        now + timedelta(days=365)
    ).add_extension(
        x509.SubjectKeyIdentifier.from_public_key(private_key.public_key()),
        critical=False,
    ).add_extension(
        x509.AuthorityKeyIdentifier.from_issuer_public_key(private_key.public_key()),
        critical=False,
    ).sign(private_key, hashes.SHA256())


@pytest.fixture(scope="session")
def rsa_signing_key() -> RsaSigningKey:
    """RSA 2048 key with its self-signed certificate."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return RsaSigningKey(
        private_key=private_key,
        certificate=_self_signed_certificate(private_key, "Test SP"),
    )


@pytest.fixture(scope="session")
def dsa_signing_key() -> DsaSigningKey:
    """DSA 2048 key with its self-signed certificate."""
    private_key = dsa.generate_private_key(key_size=2048)
    return DsaSigningKey(
        private_key=private_key,
        certificate=_self_signed_certificate(private_key, "Test DSA SP"),
    )


@pytest.fixture(scope="session")
def other_certificate() -> x509.Certificate:
    """Certificate for an unrelated RSA key."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return _self_signed_certificate(private_key, "Unrelated IdP")


@pytest.fixture(scope="session")
def rsa_certificate_b64(rsa_signing_key: RsaSigningKey) -> str:
    """Base64 DER body of the RSA certificate."""
    return certificate_to_base64(rsa_signing_key.certificate)


@pytest.fixture(scope="session")
def other_certificate_b64(other_certificate: x509.Certificate) -> str:
    """Base64 DER body of the unrelated certificate."""
    return certificate_to_base64(other_certificate)


@pytest.fixture
def unsigned_response() -> str:
    """Minimal unsigned SAML response."""
    return UNSIGNED_RESPONSE


@pytest.fixture
def keystore_password() -> bytes:
    """Password protecting the p12_keystore fixture."""
    return KEYSTORE_PASSWORD


@pytest.fixture
def p12_keystore(tmp_path: Path, rsa_signing_key: RsaSigningKey) -> Path:
    """PKCS12 keystore holding the RSA key, protected with KEYSTORE_PASSWORD."""
    p12_data = pkcs12.serialize_key_and_certificates(
        name=b"Test SP",
        key=rsa_signing_key.private_key,
        cert=rsa_signing_key.certificate,
        cas=None,
        encryption_algorithm=serialization.BestAvailableEncryption(KEYSTORE_PASSWORD),
    )
    p12_path = tmp_path / "sp.p12"
    p12_path.write_bytes(p12_data)
    return p12_path


@pytest.fixture
def pem_key_pair(tmp_path: Path, rsa_signing_key: RsaSigningKey) -> tuple[Path, Path]:
    """Unencrypted PEM certificate and private key files for the RSA key."""
    cert_path = tmp_path / "sp.pem"
    key_path = tmp_path / "sp-key.pem"
    cert_path.write_bytes(
        rsa_signing_key.certificate.public_bytes(serialization.Encoding.PEM)
    )
    key_path.write_bytes(
        rsa_signing_key.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    return cert_path, key_path


@pytest.fixture(autouse=True)
def _clear_certificate_cache():
    """Keep the parsed-certificate cache from leaking between tests."""
    yield
    clear_certificate_cache()


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch):
    """Remove SAML_SSO_* overrides that may be set on the host."""
    for name in list(os.environ):
        if name.startswith("SAML_SSO_"):
            monkeypatch.delenv(name, raising=False)
