"""XML signature verification module using signxml library.

This module validates the enveloped signature of an incoming SAML document
against a trusted certificate supplied out of band. The verification key is
always taken from that certificate, never from KeyInfo material inside the
document, which closes the door on signature wrapping with attacker keys.

A cryptographically invalid signature is reported as False. A structurally
broken Signature element raises MalformedSignatureError. Whether an unsigned
document is acceptable is an explicit policy argument with no default.
"""

import logging
from typing import FrozenSet, Optional, Tuple, Type

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec, rsa
from lxml import etree
from signxml import DigestAlgorithm, SignatureConfiguration, SignatureMethod, XMLVerifier
from signxml.exceptions import InvalidInput, InvalidSignature, SignXMLException

from ..utils.exceptions import MalformedSignatureError
from .certificate_manager import get_certificate_info, parse_certificate
from .xmldoc import XmlInput, canonicalize, parse_xml

logger = logging.getLogger(__name__)

# XML Signature namespace
DS_NS = "http://www.w3.org/2000/09/xmldsig#"
SIGNATURE_TAG = f"{{{DS_NS}}}Signature"
SIGNATURE_METHOD_PATH = f"{{{DS_NS}}}SignedInfo/{{{DS_NS}}}SignatureMethod"

__all__ = [
    "DS_NS",
    "SAMLVerifier",
    "canonicalize",
    "locate_signature",
    "verify_signature",
]


def _signature_methods(allow_legacy_sha1: bool) -> FrozenSet[SignatureMethod]:
    return frozenset(
        method for method in SignatureMethod
        if not method.name.startswith("HMAC")
        and (allow_legacy_sha1 or "SHA1" not in method.name)
    )


def _digest_algorithms(allow_legacy_sha1: bool) -> FrozenSet[DigestAlgorithm]:
    return frozenset(
        algorithm for algorithm in DigestAlgorithm
        if allow_legacy_sha1 or "SHA1" not in algorithm.name
    )


def locate_signature(root: etree._Element) -> Optional[etree._Element]:
    """Return the first XML-DSig Signature element of a document, or None.

    The root element itself is included in the search.
    """
    return next(root.iter(SIGNATURE_TAG), None)


def _expected_key_types(signature: etree._Element) -> Optional[Tuple[Type, ...]]:
    """Public key types able to check the declared SignatureMethod.

    Returns None when the method is absent or unknown, leaving the
    structural check to signxml.
    """
    method = signature.find(SIGNATURE_METHOD_PATH)
    if method is None:
        return None
    try:
        name = SignatureMethod(method.get("Algorithm")).name
    except ValueError:
        return None

    if name.startswith("ECDSA"):
        return (ec.EllipticCurvePublicKey,)
    if name.startswith("DSA"):
        return (dsa.DSAPublicKey,)
    if "RSA" in name:
        return (rsa.RSAPublicKey,)
    return None


class SAMLVerifier:
    """Verify enveloped XML signatures on SAML documents.

    The trusted certificate is bound at construction and is the only source
    of the verification key. A SignatureMethod whose key family differs from
    the certificate's key verifies as False.

    verify reports only that the document carries one valid signature, not
    which element it covers: a document whose signature covers only a
    nested element can still verify as True. Callers that trust particular
    content must check that it lies within the signed element.

    Attributes:
        certificate: Trusted counterparty certificate
        require_signature: Reject documents without a Signature element
        allow_legacy_sha1: Accept SHA-1 signature and digest methods

    Example:
        >>> cert = parse_certificate(config.verification.idp_certificate)
        >>> verifier = SAMLVerifier(cert, require_signature=True)
        >>> if not verifier.verify(response_xml):
        ...     reject()
    """

    def __init__(
        self,
        certificate: x509.Certificate,
        *,
        require_signature: bool,
        allow_legacy_sha1: bool = False,
    ) -> None:
        """Initialize SAML verifier.

        Args:
            certificate: Trusted counterparty certificate
            require_signature: Whether an unsigned document is rejected
            allow_legacy_sha1: Whether SHA-1 based signatures are accepted
        """
        self.certificate = certificate
        self.require_signature = require_signature
        self.allow_legacy_sha1 = allow_legacy_sha1
        self._cert_pem = certificate.public_bytes(
            encoding=serialization.Encoding.PEM
        ).decode("ascii")
        self._config = SignatureConfiguration(
            require_x509=True,
            expect_references=1,
            ignore_ambiguous_key_info=True,
            signature_methods=_signature_methods(allow_legacy_sha1),
            digest_algorithms=_digest_algorithms(allow_legacy_sha1),
        )

        logger.debug(
            f"SAMLVerifier initialized: certificate={get_certificate_info(certificate).subject}, "
            f"require_signature={require_signature}, allow_legacy_sha1={allow_legacy_sha1}"
        )

    def verify(self, xml: XmlInput) -> bool:
        """Verify the XML signature of a SAML document.

        Args:
            xml: SAML XML text or element

        Returns:
            True if the signature is valid, or the document is unsigned and
            require_signature is False. False if the digest or the signature
            value does not verify with the trusted certificate, the
            SignatureMethod needs a different key type, or the
            document is unsigned and require_signature is True.

        Raises:
            MalformedXMLError: If the XML cannot be parsed
            MalformedSignatureError: If the Signature element is ill-formed
        """
        root = parse_xml(xml)

        signature = locate_signature(root)
        if signature is None:
            if self.require_signature:
                logger.warning("Rejected unsigned SAML document: signature required by policy")
                return False
            logger.info("Accepted unsigned SAML document: signature not required by policy")
            return True

        expected = _expected_key_types(signature)
        if expected is not None and not isinstance(self.certificate.public_key(), expected):
            logger.warning(
                f"SAML signature verification failed: SignatureMethod "
                f"{signature.find(SIGNATURE_METHOD_PATH).get('Algorithm')} does not match "
                f"the trusted certificate key type."
            )
            return False

        try:
            XMLVerifier().verify(
                root,
                x509_cert=self._cert_pem,
                expect_config=self._config,
            )
        except InvalidSignature as e:
            logger.warning(
                f"SAML signature verification failed: {e}. "
                f"Document may be tampered or signed with a different key."
            )
            return False
        except (InvalidInput, SignXMLException, etree.DocumentInvalid, etree.XMLSchemaError) as e:
            logger.error(f"Malformed SAML signature: {e}")
            raise MalformedSignatureError(
                f"Malformed XML signature: {e}. "
                f"Check the Signature element structure and algorithms."
            ) from e

        logger.info("SAML signature verification successful")
        return True


def verify_signature(
    xml: XmlInput,
    certificate_string: str,
    *,
    require_signature: bool,
    allow_legacy_sha1: bool = False,
) -> bool:
    """Verify a document against a base64 certificate string.

    Raises:
        CertificateParseError: If the certificate string cannot be parsed
        MalformedXMLError: If the XML cannot be parsed
        MalformedSignatureError: If the Signature element is ill-formed
    """
    verifier = SAMLVerifier(
        parse_certificate(certificate_string),
        require_signature=require_signature,
        allow_legacy_sha1=allow_legacy_sha1,
    )
    return verifier.verify(xml)
