"""HTTP-Redirect binding codec for SAML protocol messages.

Outbound messages are UTF-8 encoded, compressed with raw DEFLATE (no zlib
header or trailer), base64 encoded and percent-encoded for a URL query string.
Inbound messages go through the exact inverse. A non-compressing base64
variant and an HTML form helper cover the HTTP-POST binding.

Only compress content that is fixed before it reaches this module. Mixing
secrets with attacker-influenced text in one compressed payload leaks
information through the compressed length.
"""

import base64
import binascii
import logging
import zlib
from typing import Mapping
from urllib.parse import quote, unquote, urlencode

from ..utils.exceptions import DecodeError

logger = logging.getLogger(__name__)

CHARSET = "utf-8"

# Negative window bits select raw DEFLATE streams
RAW_DEFLATE_WBITS = -15

INFLATE_CHUNK_SIZE = 1024
DEFAULT_MAX_INFLATED_SIZE = 1024 * 1024


def byte_deflate(data: bytes) -> bytes:
    """Compress bytes into a raw DEFLATE stream."""
    compressor = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, RAW_DEFLATE_WBITS)
    return compressor.compress(data) + compressor.flush()


def byte_inflate(data: bytes, max_size: int = DEFAULT_MAX_INFLATED_SIZE) -> bytes:
    """Inflate a raw DEFLATE stream through a bounded buffer.

    Args:
        data: Compressed bytes
        max_size: Upper limit on the inflated size in bytes

    Returns:
        Inflated bytes

    Raises:
        DecodeError: If the stream is corrupt, truncated or too large
    """
    inflater = zlib.decompressobj(RAW_DEFLATE_WBITS)
    chunks = []
    total = 0
    pending = data
    try:
        while True:
            chunk = inflater.decompress(pending, INFLATE_CHUNK_SIZE)
            total += len(chunk)
            if total > max_size:
                raise DecodeError(
                    f"Inflated message exceeds {max_size} bytes. "
                    f"Refusing to decode oversized SAML payload."
                )
            chunks.append(chunk)
            pending = inflater.unconsumed_tail
            if inflater.eof or (not pending and not chunk):
                break
    except zlib.error as e:
        raise DecodeError(f"Corrupt DEFLATE stream: {e}") from e

    if not inflater.eof:
        raise DecodeError("Truncated DEFLATE stream: end of data reached before end marker")

    return b"".join(chunks)


def _b64decode(value: str) -> bytes:
    try:
        return base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise DecodeError(f"Malformed base64 payload: {e}") from e


def _to_text(data: bytes) -> str:
    try:
        return data.decode(CHARSET)
    except UnicodeDecodeError as e:
        raise DecodeError(f"Decoded payload is not valid UTF-8: {e}") from e


def base64_encode(text: str) -> str:
    """Base64-encode the UTF-8 bytes of text without compression."""
    return base64.b64encode(text.encode(CHARSET)).decode("ascii")


def base64_decode(value: str) -> str:
    """Decode a base64 string produced by base64_encode.

    Raises:
        DecodeError: If the value is not valid base64 or not UTF-8
    """
    return _to_text(_b64decode(value))


def deflate_and_base64_encode(xml: str) -> str:
    """Compress and base64-encode XML text, without URL encoding."""
    return base64.b64encode(byte_deflate(xml.encode(CHARSET))).decode("ascii")


def decode_base64_and_inflate(value: str, max_size: int = DEFAULT_MAX_INFLATED_SIZE) -> str:
    """Inverse of deflate_and_base64_encode."""
    return _to_text(byte_inflate(_b64decode(value), max_size=max_size))


def encode(xml: str) -> str:
    """Encode XML text into an HTTP-Redirect transport string.

    Args:
        xml: SAML XML text

    Returns:
        Percent-encoded base64 of the raw DEFLATE compressed UTF-8 bytes

    Example:
        >>> transport = encode("<a/>")
        >>> decode(transport)
        '<a/>'
    """
    transport = quote(deflate_and_base64_encode(xml), safe="")
    logger.debug(f"Encoded {len(xml)} characters of XML into {len(transport)} transport characters")
    return transport


def decode(transport: str, max_size: int = DEFAULT_MAX_INFLATED_SIZE) -> str:
    """Decode an HTTP-Redirect transport string back into XML text.

    Args:
        transport: Percent-encoded, base64, raw DEFLATE payload
        max_size: Upper limit on the inflated size in bytes

    Returns:
        The original XML text

    Raises:
        DecodeError: If any decoding stage fails
    """
    try:
        xml = decode_base64_and_inflate(unquote(transport), max_size=max_size)
    except DecodeError as e:
        logger.warning(f"Rejected transport string: {e}")
        raise
    logger.debug(f"Decoded transport string into {len(xml)} characters of XML")
    return xml


def uri_query_str(params: Mapping[str, str]) -> str:
    """Form-encode a mapping into a query string."""
    return urlencode(params)


def form_encode_b64(params: Mapping[str, str]) -> dict[str, str]:
    """Base64-encode every value of a form field mapping."""
    return {name: base64_encode(value) for name, value in params.items()}


def saml_form_encode(params: Mapping[str, str]) -> str:
    """Base64-encode every value, then form-encode the mapping.

    Used when posting SAML messages through an auto-submitting HTML form.

    Example:
        >>> saml_form_encode({"SAMLResponse": "<a/>"})
        'SAMLResponse=PGEvPg%3D%3D'
    """
    return uri_query_str(form_encode_b64(params))
