"""KML parsing activity for dispersion output documents.

Reads a HYSPLIT KML document once, in full, and decodes it into a
``KmlDocument``: the style table plus one ``Folder`` per time step.

The parsing pipeline is split into focused stages:
- **_validation**: read, truncation check, XML/KML root check
- **_normalization**: coordinate text, KML colours, style table
- **_lxml_parser**: element-tree walk building the document model

Every failure here is fatal to the whole run (unreadable file, empty or
truncated document, malformed XML, missing ``<Document>``).  Per-folder
problems are left to the aggregator, which skips the folder instead.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from kml_dispersion.activities.parse_kml._constants import (
    KML_CLOSING_TAG,
    KML_COLOR_LENGTH,
    KML_NAMESPACE,
    STYLE_REF_SIGIL,
)
from kml_dispersion.activities.parse_kml._lxml_parser import parse_with_lxml
from kml_dispersion.activities.parse_kml._normalization import (
    build_style_table,
    parse_coordinates_text,
    parse_kml_color,
)
from kml_dispersion.activities.parse_kml._validation import (
    KmlParseError,
    KmlValidationError,
    read_kml_bytes,
    validate_complete,
    validate_xml,
)

if TYPE_CHECKING:
    from kml_dispersion.models.document import KmlDocument

logger = logging.getLogger("kml_dispersion.activities.parse_kml")

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "KML_CLOSING_TAG",
    "KML_COLOR_LENGTH",
    "KML_NAMESPACE",
    "STYLE_REF_SIGIL",
    "KmlParseError",
    "KmlValidationError",
    "build_style_table",
    "parse_coordinates_text",
    "parse_kml_bytes",
    "parse_kml_color",
    "parse_kml_file",
    "parse_with_lxml",
    "read_kml_bytes",
    "validate_complete",
    "validate_xml",
]


def parse_kml_bytes(content: bytes, *, source_filename: str = "") -> KmlDocument:
    """Decode an in-memory KML document.

    Args:
        content: Raw document bytes.
        source_filename: Original filename for diagnostics.

    Returns:
        The decoded ``KmlDocument`` (possibly with no folders).

    Raises:
        KmlParseError: If the document is empty, truncated, not valid
            XML, or not KML.
        KmlValidationError: If the document has no ``<Document>`` node.
    """
    logger.info("Parsing KML document: %s (%d bytes)", source_filename or "<memory>", len(content))

    root = validate_xml(validate_complete(content))
    document = parse_with_lxml(root, source_filename)

    logger.info(
        "Parsed %d folder(s) and %d style(s) from %s",
        len(document.folders),
        len(document.styles),
        source_filename or "<memory>",
    )
    return document


def parse_kml_file(kml_path: Path | str, *, source_filename: str = "") -> KmlDocument:
    """Read and decode a KML file from disk.

    The file is read in full and closed before decoding starts.

    Args:
        kml_path: Filesystem path to the KML file (str or pathlib.Path).
        source_filename: Original filename for diagnostics (defaults to path name).

    Raises:
        KmlParseError: If the file cannot be read or decoded.
        KmlValidationError: If the document has no ``<Document>`` node.
    """
    kml_path = Path(kml_path)
    if not source_filename:
        source_filename = kml_path.name

    content = read_kml_bytes(kml_path)
    return parse_kml_bytes(content, source_filename=source_filename)
