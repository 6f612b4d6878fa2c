"""Custom exception classes for the SAML SSO core.

All exceptions inherit from SAMLCoreError to allow catching all custom exceptions.
A cryptographically invalid signature is not an exception: verifiers return
False for it. Everything here means the exchange must be aborted.
"""


class SAMLCoreError(Exception):
    """Base exception for all SAML SSO core custom exceptions."""

    pass


class ConfigurationError(SAMLCoreError):
    """Raised when configuration loading or validation fails.
    
    Examples:
        - Invalid configuration file format
        - Configuration value out of range
        - Unknown digest algorithm name
    """

    pass


class DecodeError(SAMLCoreError):
    """Raised when a transport string cannot be turned back into XML.
    
    Examples:
        - Malformed or truncated base64
        - Corrupt or truncated DEFLATE stream
        - Inflated payload larger than the configured limit
        - Payload that is not UTF-8
    """

    pass


class CertificateParseError(SAMLCoreError):
    """Raised when an X.509 certificate string cannot be parsed.
    
    Examples:
        - Invalid base64 body
        - DER bytes that are not a certificate
        - Certificate missing where one is required
    """

    pass


class KeyMaterialError(SAMLCoreError):
    """Raised when signing key material cannot be loaded or used.
    
    Examples:
        - Keystore file not found
        - Incorrect keystore password
        - Keystore without a private key or certificate
    """

    pass


class SigningError(KeyMaterialError):
    """Raised when an XML document cannot be signed.
    
    Examples:
        - Unsupported private key algorithm (anything but RSA or DSA)
        - Digest algorithm not available for the key type
        - Signature library rejected the key or certificate
    """

    pass


class MalformedXMLError(SAMLCoreError):
    """Raised when XML is not well-formed.
    
    Examples:
        - Unclosed tags
        - Invalid characters
        - Empty document
    """

    pass


class MalformedSignatureError(SAMLCoreError):
    """Raised when a Signature element is present but structurally broken.
    
    Examples:
        - Missing SignedInfo or SignatureValue
        - Unknown canonicalization or signature method
        - Reference that does not resolve
    """

    pass
