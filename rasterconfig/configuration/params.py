"""
Parameter Extraction

Turns a raw descriptor into a flat mapping of string keys to string values.
Two descriptor forms are understood:

- a parameter string: ``key=value;key2=value2;flag``
- a document locator (path, file:// or http(s):// URL) naming a small XML
  document whose root's child elements are the key/value pairs::

      <config>
        <type>memory</type>
        <gwNamespace>tiles</gwNamespace>
        <scaleTo8Bit>true</scaleTo8Bit>
      </config>

Documents are untrusted input. They are parsed with defusedxml with DTDs,
entity declarations and external references forbidden, so nothing is ever
expanded or fetched on their behalf.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Mapping, Optional
from urllib.parse import unquote, urlparse
from xml.etree.ElementTree import ParseError

import defusedxml.ElementTree as DefusedET
import requests
from defusedxml import DefusedXmlException

from rasterconfig.errors import DocumentParseError, MalformedDescriptor

logger = logging.getLogger(__name__)

ENTRY_SEPARATOR = ";"
KEY_VALUE_SEPARATOR = "="

_URL_PATTERN = re.compile(r"^(https?|file)://", re.IGNORECASE)


def parse_params(descriptor: str) -> Dict[str, str]:
    """Parse ``key=value;...`` into a dict.

    Entries split on the first '=', keys and values are stripped, a key without
    a value maps to "" and blank entries are skipped.

    Raises:
        MalformedDescriptor: None input, an empty key, or a repeated key. No
            partial mapping is returned.
    """
    if descriptor is None:
        raise MalformedDescriptor("Descriptor must be a string, got None")
    params: Dict[str, str] = {}
    for position, entry in enumerate(descriptor.split(ENTRY_SEPARATOR)):
        if not entry.strip():
            continue
        key, _, value = entry.partition(KEY_VALUE_SEPARATOR)
        key = key.strip()
        if not key:
            raise MalformedDescriptor(f"Entry {position} has an empty key")
        if key in params:
            raise MalformedDescriptor(f"Key '{key}' appears more than once")
        params[key] = value.strip()
    return params


def format_params(params: Mapping[str, str]) -> str:
    """Inverse of parse_params with keys sorted, so equal mappings give equal descriptors."""
    parts = []
    for key in sorted(params):
        value = "" if params[key] is None else str(params[key])
        if ENTRY_SEPARATOR in key or KEY_VALUE_SEPARATOR in key or not key.strip():
            raise MalformedDescriptor(f"Key {key!r} cannot be written as a parameter")
        if ENTRY_SEPARATOR in value:
            raise MalformedDescriptor(f"Value for '{key}' contains '{ENTRY_SEPARATOR}'")
        parts.append(f"{key}{KEY_VALUE_SEPARATOR}{value}")
    return ENTRY_SEPARATOR.join(parts)


def is_document_locator(descriptor: str) -> bool:
    """True for http(s)/file URLs and for '.xml' paths; everything else is a parameter string."""
    if not descriptor:
        return False
    text = descriptor.strip()
    if _URL_PATTERN.match(text):
        return True
    return text.lower().endswith(".xml") and KEY_VALUE_SEPARATOR not in text


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def parse_document(text, locator: Optional[str] = None) -> Dict[str, str]:
    """Parse a single-level parameter document.

    Raises:
        DocumentParseError: malformed markup, DOCTYPE or entity declarations,
            or a repeated child element
    """
    try:
        root = DefusedET.fromstring(text, forbid_dtd=True, forbid_entities=True, forbid_external=True)
    except DefusedXmlException as e:
        raise DocumentParseError(f"Rejected untrusted document content: {e}", locator=locator) from e
    except ParseError as e:
        raise DocumentParseError(f"Malformed parameter document: {e}", locator=locator) from e

    params: Dict[str, str] = {}
    for child in root:
        if not isinstance(child.tag, str):
            continue  # comments and processing instructions
        key = _local_name(child.tag)
        if key in params:
            raise DocumentParseError(f"Element '{key}' appears more than once", locator=locator)
        params[key] = "".join(child.itertext()).strip()
    return params


def _fetch(locator: str, timeout: float) -> bytes:
    parsed = urlparse(locator)
    scheme = parsed.scheme.lower()
    if scheme in ("http", "https"):
        response = requests.get(locator, timeout=timeout)
        response.raise_for_status()
        return response.content
    path = Path(unquote(parsed.path)) if scheme == "file" else Path(locator)
    return path.read_bytes()


def read_document(locator: str, timeout: float = 10.0) -> Dict[str, str]:
    """Fetch and parse the document at locator.

    Raises:
        DocumentParseError: unreachable resource or unparseable content
    """
    try:
        content = _fetch(locator, timeout)
    except (OSError, requests.RequestException) as e:
        raise DocumentParseError(f"Could not read parameter document {locator}: {e}", locator=locator) from e
    logger.debug(f"Read {len(content)} bytes from {locator}")
    return parse_document(content, locator=locator)
