"""Validation helpers for KML parsing.

Responsibilities:
- Reading the source document exactly once
- Truncation check (document must end with its closing ``</kml>`` tag)
- XML well-formedness and KML root element validation
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kml_dispersion.activities.parse_kml._constants import KML_CLOSING_TAG, KML_NAMESPACE
from kml_dispersion.core.exceptions import PipelineError

if TYPE_CHECKING:
    from pathlib import Path

    from lxml.etree import _Element

logger = logging.getLogger("kml_dispersion.activities.parse_kml")


# ---------------------------------------------------------------------------
# Exceptions (public API, re-exported from __init__)
# ---------------------------------------------------------------------------


class KmlParseError(PipelineError):
    """Raised when a KML document cannot be read or decoded."""

    default_stage = "parse_kml"
    default_code = "KML_PARSE_FAILED"


class KmlValidationError(KmlParseError):
    """Raised when a KML document is well-formed XML but structurally unusable."""

    default_code = "KML_VALIDATION_FAILED"


# ---------------------------------------------------------------------------
# Source reading
# ---------------------------------------------------------------------------


def read_kml_bytes(kml_path: Path) -> bytes:
    """Read the whole document; the file handle is closed before returning.

    Raises:
        KmlParseError: If the file cannot be read.
    """
    try:
        return kml_path.read_bytes()
    except OSError as exc:
        msg = f"Cannot read KML file: {exc}"
        raise KmlParseError(msg) from exc


# ---------------------------------------------------------------------------
# Document validation
# ---------------------------------------------------------------------------


def validate_complete(content: bytes) -> bytes:
    """Check the document is non-empty and not truncated.

    Returns the content with surrounding whitespace stripped.

    Raises:
        KmlParseError: If the content is empty or does not end with ``</kml>``.
    """
    stripped = content.strip()
    if not stripped:
        msg = "KML file is empty"
        raise KmlParseError(msg)

    if not stripped.endswith(KML_CLOSING_TAG.encode()):
        msg = f"KML file is incomplete or malformed: missing closing {KML_CLOSING_TAG} tag"
        raise KmlParseError(msg)

    return stripped


def validate_xml(content: bytes) -> _Element:
    """Parse well-formed XML and check the root is a ``<kml>`` element.

    Returns the parsed root element.

    Raises:
        KmlParseError: If the content is not valid XML or not KML.
    """
    from lxml import etree  # type: ignore[attr-defined]

    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
    try:
        root = etree.fromstring(content, parser=parser)
    except etree.XMLSyntaxError as exc:
        msg = f"Not valid XML: {exc}"
        raise KmlParseError(msg) from exc

    qname = etree.QName(root)
    if qname.localname != "kml":
        msg = f"Not a KML file — root element is <{root.tag}>"
        raise KmlParseError(msg)

    if qname.namespace not in (None, KML_NAMESPACE):
        logger.warning("Unexpected KML namespace %s, parsing anyway", qname.namespace)

    return root
