"""Custom log formatters for the SAML SSO core.

This module provides a formatter that masks SAML payloads, relay states,
signatures and PEM bodies before they reach a log sink.
"""

import logging
import re
from typing import List, Tuple


class SecretRedactingFormatter(logging.Formatter):
    """Formatter that redacts transport payloads and key material from log messages.

    Attributes:
        redact_secrets: Whether to enable redaction
        patterns: List of (regex_pattern, replacement_text) tuples for redaction

    Example:
        >>> formatter = SecretRedactingFormatter(
        ...     fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        ...     redact_secrets=True
        ... )
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: str | None = None,
        redact_secrets: bool = True,
    ) -> None:
        """Initialize the SecretRedactingFormatter.

        Args:
            fmt: Log message format string
            datefmt: Date format string (optional)
            redact_secrets: Whether to enable redaction
        """
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_secrets = redact_secrets

        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # Query/form parameters: SAMLRequest=..., RelayState=..., Signature=...
            (re.compile(r'\b(SAMLRequest|SAMLResponse|RelayState|Signature)=[^&\s]+'),
             r'\1=[REDACTED]'),

            # PEM blocks of any kind
            (re.compile(r'-----BEGIN ([A-Z ]+)-----.*?-----END \1-----', re.DOTALL),
             r'-----BEGIN \1-----[REDACTED]-----END \1-----'),

            # Inline XML signature values
            (re.compile(r'(<(?:\w+:)?SignatureValue[^>]*>)[^<]*(</)'), r'\1[REDACTED]\2'),
        ]

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with optional redaction.

        Args:
            record: Log record to format

        Returns:
            Formatted log message with secrets redacted if enabled
        """
        original = super().format(record)

        if self.redact_secrets:
            for pattern, replacement in self.patterns:
                original = pattern.sub(replacement, original)

        return original
