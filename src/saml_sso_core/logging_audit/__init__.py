"""Logging Audit module.

This module provides logging configuration and secret redaction.
"""

from .formatters import SecretRedactingFormatter
from .logger import configure_logging

__all__ = [
    "configure_logging",
    "SecretRedactingFormatter",
]
