"""Namespace-aware XML parsing and canonical serialization helpers."""

import copy
import logging
from typing import Union

from lxml import etree

from ..utils.exceptions import MalformedXMLError

logger = logging.getLogger(__name__)

XmlInput = Union[str, bytes, etree._Element]


def new_parser() -> etree.XMLParser:
    """Create a parser that never resolves entities or touches the network.

    Parsers are not shared across calls since lxml parsers are not thread-safe.
    """
    return etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)


def parse_xml(xml: XmlInput) -> etree._Element:
    """Parse XML text into a new root element.

    An element passed in is deep-copied, so callers keep exclusive
    ownership of their own tree.

    Raises:
        MalformedXMLError: If the text is not well-formed XML
    """
    if isinstance(xml, etree._Element):
        return copy.deepcopy(xml)

    data = xml.encode("utf-8") if isinstance(xml, str) else xml
    try:
        root = etree.fromstring(data, new_parser())
    except etree.XMLSyntaxError as e:
        error_msg = f"Malformed XML at line {e.lineno}: {e.msg}"
        logger.error(error_msg)
        raise MalformedXMLError(error_msg) from e

    if root is None:
        raise MalformedXMLError("XML document is empty")
    return root


def canonicalize(node: etree._Element) -> str:
    """Serialize a subtree with exclusive C14N, comments omitted.

    Example:
        >>> canonicalize(etree.fromstring('<a   b="1"/>'))
        '<a b="1"></a>'
    """
    return etree.tostring(node, method="c14n", exclusive=True, with_comments=False).decode("utf-8")
