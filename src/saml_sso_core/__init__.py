"""SAML SSO core.

HTTP-Redirect binding codec, XML digital signatures and relay-state
protection for SAML 2.0 single sign-on exchanges.
"""

__version__ = "0.1.0"
