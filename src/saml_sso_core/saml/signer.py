"""XML signing module using signxml library.

This module signs outgoing SAML documents with an enveloped XML Signature.
The reference is transformed with the enveloped-signature transform followed
by exclusive C14N (comments omitted), and SignedInfo is canonicalized the
same way. The signature method follows the signing key variant (RSA or DSA)
and the configured digest. Both the certificate and the raw public key are
embedded in KeyInfo.

SHA-256 is the default digest. SHA-1 stays available for legacy identity
providers.
"""

import logging
from typing import Dict, Type

from cryptography.hazmat.primitives import serialization
from lxml import etree
from signxml import CanonicalizationMethod, DigestAlgorithm, SignatureMethod, XMLSigner
from signxml.exceptions import SignXMLException

from ..models.saml import DsaSigningKey, RsaSigningKey, SigningKey
from ..utils.exceptions import SigningError
from .certificate_manager import get_certificate_info
from .xmldoc import XmlInput, canonicalize, parse_xml

logger = logging.getLogger(__name__)

# XML Signature namespace
DS_NS = "http://www.w3.org/2000/09/xmldsig#"

DEFAULT_DIGEST_ALGORITHM = "sha256"
LEGACY_DIGEST_ALGORITHM = "sha1"

DIGEST_ALGORITHMS: Dict[str, DigestAlgorithm] = {
    "sha1": DigestAlgorithm.SHA1,
    "sha256": DigestAlgorithm.SHA256,
    "sha512": DigestAlgorithm.SHA512,
}

SIGNATURE_METHODS: Dict[Type, Dict[str, SignatureMethod]] = {
    RsaSigningKey: {
        "sha1": SignatureMethod.RSA_SHA1,
        "sha256": SignatureMethod.RSA_SHA256,
        "sha512": SignatureMethod.RSA_SHA512,
    },
    DsaSigningKey: {
        "sha1": SignatureMethod.DSA_SHA1,
        "sha256": SignatureMethod.DSA_SHA256,
    },
}


class LegacyXMLSigner(XMLSigner):
    """XMLSigner that also accepts SHA-1 signature and digest methods."""

    def check_deprecated_methods(self) -> None:
        pass


class SAMLSigner:
    """Sign SAML documents with enveloped XML digital signatures.

    The signer holds algorithm choices only. Key material is borrowed for
    the duration of each sign() call and never stored on the instance.

    Attributes:
        digest_algorithm: Digest name (sha1, sha256, sha512)

    Example:
        >>> signing_key = load_key_material(Path("certs/sp.p12"), password=b"secret")
        >>> signer = SAMLSigner()
        >>> signed_xml = signer.sign(response_xml, signing_key)
        >>> assert "<ds:Signature" in signed_xml
    """

    def __init__(self, digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM) -> None:
        """Initialize SAML signer.

        Args:
            digest_algorithm: Digest name (sha1, sha256, sha512)

        Raises:
            ValueError: If the digest algorithm is unknown
        """
        digest_algorithm = digest_algorithm.lower()
        if digest_algorithm not in DIGEST_ALGORITHMS:
            raise ValueError(
                f"Unsupported digest algorithm: {digest_algorithm}. "
                f"Supported algorithms: {', '.join(DIGEST_ALGORITHMS.keys())}"
            )

        if digest_algorithm == LEGACY_DIGEST_ALGORITHM:
            logger.warning(
                "SAMLSigner configured with legacy SHA-1 digest. "
                "Use sha256 unless the identity provider requires SHA-1."
            )

        self.digest_algorithm = digest_algorithm

    def signature_method(self, signing_key: SigningKey) -> SignatureMethod:
        """Select the signature method for a key variant and the configured digest.

        Raises:
            SigningError: If the key variant or digest combination is unsupported
        """
        methods = SIGNATURE_METHODS.get(type(signing_key))
        if methods is None:
            raise SigningError(
                f"Unsupported signing key: {type(signing_key).__name__}. "
                f"Load key material with load_key_material() or signing_key_from()."
            )

        method = methods.get(self.digest_algorithm)
        if method is None:
            raise SigningError(
                f"Digest {self.digest_algorithm} is not available for "
                f"{type(signing_key).__name__}. "
                f"Supported digests: {', '.join(methods.keys())}"
            )
        return method

    def _xml_signer(self, signing_key: SigningKey) -> XMLSigner:
        signer_class = LegacyXMLSigner if self.digest_algorithm == LEGACY_DIGEST_ALGORITHM else XMLSigner
        return signer_class(
            signature_algorithm=self.signature_method(signing_key),
            digest_algorithm=DIGEST_ALGORITHMS[self.digest_algorithm],
            c14n_algorithm=CanonicalizationMethod.EXCLUSIVE_XML_CANONICALIZATION_1_0,
        )

    def sign_element(self, xml: XmlInput, signing_key: SigningKey) -> etree._Element:
        """Sign a document and return the signed root element.

        The input is parsed into (or copied as) a new tree, so a caller's
        element is never mutated.

        Raises:
            MalformedXMLError: If the XML cannot be parsed
            SigningError: If the key material cannot sign the document
        """
        root = parse_xml(xml)
        xml_signer = self._xml_signer(signing_key)

        cert_pem = signing_key.certificate.public_bytes(
            encoding=serialization.Encoding.PEM
        )
        key_pem = signing_key.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

        try:
            signed_root = xml_signer.sign(
                root,
                key=key_pem,
                cert=cert_pem,
                always_add_key_value=True,
            )
        except SignXMLException as e:
            logger.error(f"XML signing failed: {e}")
            raise SigningError(
                f"XML signing failed: {e}. "
                f"Check that the private key matches the certificate."
            ) from e

        return signed_root

    def sign(self, xml: XmlInput, signing_key: SigningKey) -> str:
        """Sign a SAML document with an enveloped XML digital signature.

        The Signature element is appended as the last child of the document
        root and carries the digest of the canonicalized document, the
        signature value, and KeyInfo with both X509Data and KeyValue.

        Args:
            xml: SAML XML text or element
            signing_key: RSA or DSA key variant with its certificate

        Returns:
            Exclusive C14N serialization of the signed document

        Raises:
            MalformedXMLError: If the XML cannot be parsed
            SigningError: If the key material cannot sign the document
        """
        subject = get_certificate_info(signing_key.certificate).subject
        logger.info(f"Signing SAML document with {self.signature_method(signing_key).name} ({subject})")

        signed_xml = canonicalize(self.sign_element(xml, signing_key))

        logger.debug(f"Signed document is {len(signed_xml)} characters")
        return signed_xml


def sign_document(
    xml: XmlInput,
    signing_key: SigningKey,
    digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM,
) -> str:
    """Sign a document with a one-off SAMLSigner."""
    return SAMLSigner(digest_algorithm=digest_algorithm).sign(xml, signing_key)
