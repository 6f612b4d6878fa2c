"""SAML 2.0 transport and integrity module.

This module provides functionality for:
- Encoding and decoding messages for the HTTP-Redirect binding
- Parsing trust certificates and loading signing key material
- Signing SAML documents with enveloped XML signatures (using SignXML)
- Verifying XML signatures against an out-of-band trusted certificate
- Signing relay-state tokens and checking their freshness
"""

from saml_sso_core.saml import relay_state
from saml_sso_core.saml.attributes import (
    STATUS_SUCCESS,
    is_saml_successful,
    make_issue_instant,
    saml2_attr_to_name,
)
from saml_sso_core.saml.certificate_manager import (
    certificate_to_base64,
    clear_certificate_cache,
    get_certificate_info,
    load_key_material,
    parse_certificate,
    public_key,
    signing_key_from,
)
from saml_sso_core.saml.codec import (
    base64_decode,
    base64_encode,
    decode,
    encode,
    saml_form_encode,
)
from saml_sso_core.saml.relay_state import RelayStateGuard, new_secret_key
from saml_sso_core.saml.signer import SAMLSigner, sign_document
from saml_sso_core.saml.verifier import (
    SAMLVerifier,
    canonicalize,
    locate_signature,
    verify_signature,
)

__all__ = [
    # Codec
    "encode",
    "decode",
    "base64_encode",
    "base64_decode",
    "saml_form_encode",
    # Trust material and key provider
    "parse_certificate",
    "public_key",
    "certificate_to_base64",
    "clear_certificate_cache",
    "get_certificate_info",
    "load_key_material",
    "signing_key_from",
    # Signing and verification
    "SAMLSigner",
    "sign_document",
    "SAMLVerifier",
    "verify_signature",
    "locate_signature",
    "canonicalize",
    # Relay state
    "relay_state",
    "RelayStateGuard",
    "new_secret_key",
    # SAML constants
    "STATUS_SUCCESS",
    "is_saml_successful",
    "saml2_attr_to_name",
    "make_issue_instant",
]
