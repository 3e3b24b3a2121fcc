"""lxml-based KML decoder for HYSPLIT dispersion documents.

Walks ``kml/Document`` and builds a ``KmlDocument``:

- ``Document/Style`` → ``(id, PolyStyle/color)`` pairs for the style table
- ``Document/Folder`` → ``Folder`` (name, ``TimeSpan/begin``, placemarks)
- ``Folder/Placemark`` → ``Placemark`` (``styleUrl`` plus the outer ring of
  every ``Polygon``, either under ``MultiGeometry`` or directly)

Documents with and without the KML 2.2 default namespace are accepted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kml_dispersion.activities.parse_kml._normalization import (
    build_style_table,
    parse_coordinates_text,
)
from kml_dispersion.activities.parse_kml._validation import KmlValidationError
from kml_dispersion.models.document import Folder, KmlDocument, Placemark

if TYPE_CHECKING:
    from lxml.etree import _Element

    from kml_dispersion.models.document import Ring

logger = logging.getLogger("kml_dispersion.activities.parse_kml")

_POLYGON_PATHS = ("MultiGeometry/Polygon", "Polygon")
_OUTER_RING_PATH = "outerBoundaryIs/LinearRing/coordinates"


class _Paths:
    """Qualifies slash-separated element paths with the document namespace."""

    def __init__(self, namespace: str | None) -> None:
        self.ns = {"kml": namespace} if namespace else None

    def __call__(self, path: str) -> str:
        if self.ns is None:
            return path
        return "/".join(f"kml:{step}" for step in path.split("/"))


def parse_with_lxml(root: _Element, source_filename: str = "") -> KmlDocument:
    """Decode a validated ``<kml>`` root element into a ``KmlDocument``.

    Raises:
        KmlValidationError: If the root has no ``Document`` element.
    """
    from lxml import etree  # type: ignore[attr-defined]

    paths = _Paths(etree.QName(root).namespace)

    document = root.find(paths("Document"), paths.ns)
    if document is None:
        msg = "KML file has no <Document> element"
        raise KmlValidationError(msg)

    style_pairs = [
        (style.get("id", ""), _text(style.find(paths("PolyStyle/color"), paths.ns)))
        for style in document.findall(paths("Style"), paths.ns)
    ]
    styles, invalid_styles = build_style_table(style_pairs)

    folders = [
        _parse_folder(folder_elem, paths)
        for folder_elem in document.findall(paths("Folder"), paths.ns)
    ]

    logger.debug(
        "Decoded KML document | file=%s | styles=%d | folders=%d",
        source_filename,
        len(styles),
        len(folders),
    )

    return KmlDocument(
        styles=styles,
        folders=folders,
        invalid_styles=invalid_styles,
        source_file=source_filename,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _text(elem: _Element | None) -> str:
    if elem is None or elem.text is None:
        return ""
    return elem.text.strip()


def _parse_folder(folder_elem: _Element, paths: _Paths) -> Folder:
    placemarks = [
        _parse_placemark(pm, paths) for pm in folder_elem.findall(paths("Placemark"), paths.ns)
    ]
    return Folder(
        name=_text(folder_elem.find(paths("name"), paths.ns)),
        time_begin=_text(folder_elem.find(paths("TimeSpan/begin"), paths.ns)),
        placemarks=placemarks,
    )


def _parse_placemark(pm_elem: _Element, paths: _Paths) -> Placemark:
    rings: list[Ring] = []
    for polygon_path in _POLYGON_PATHS:
        for polygon in pm_elem.findall(paths(polygon_path), paths.ns):
            coords_elem = polygon.find(paths(_OUTER_RING_PATH), paths.ns)
            rings.append(parse_coordinates_text(_text(coords_elem)))
    return Placemark(
        name=_text(pm_elem.find(paths("name"), paths.ns)),
        style_url=_text(pm_elem.find(paths("styleUrl"), paths.ns)),
        rings=rings,
    )
