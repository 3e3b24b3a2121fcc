"""Shared constants for KML parsing."""

from __future__ import annotations

# KML 2.2 namespace
KML_NAMESPACE = "http://www.opengis.net/kml/2.2"

# Closing tag a complete (non-truncated) document must end with
KML_CLOSING_TAG = "</kml>"

# Placemarks reference styles as "#<id>"
STYLE_REF_SIGIL = "#"

# KML colours are aabbggrr: four two-digit hex components
KML_COLOR_LENGTH = 8
