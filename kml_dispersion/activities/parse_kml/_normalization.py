"""Coordinate and style normalization helpers for KML parsing.

Responsibilities:
- Parse KML coordinate text strings into ``(lon, lat)`` tuples
- Decode KML ``aabbggrr`` colour strings into RGBA tuples
- Build the read-only style lookup keyed by style reference
"""

from __future__ import annotations

import logging
import math
from types import MappingProxyType
from typing import TYPE_CHECKING

from kml_dispersion.activities.parse_kml._constants import KML_COLOR_LENGTH, STYLE_REF_SIGIL
from kml_dispersion.core.constants import INVALID_COLOR_RGBA

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from kml_dispersion.models.document import RGBA

logger = logging.getLogger("kml_dispersion.activities.parse_kml")

# ---------------------------------------------------------------------------
# KML coordinate text parsing
# ---------------------------------------------------------------------------


def parse_coordinates_text(text: str) -> list[tuple[float, float]]:
    """Parse KML coordinate text (``lon,lat,alt lon,lat,alt ...``) to (lon, lat) tuples.

    Altitude is ignored.  Tokens without two finite numeric fields
    (including ``nan``, ``inf`` and values that overflow to infinity)
    are dropped.
    """
    return [vertex for vertex in map(_parse_vertex, text.split()) if vertex is not None]


def _parse_vertex(token: str) -> tuple[float, float] | None:
    fields = token.split(",", 2)
    if len(fields) < 2:
        return None
    try:
        lon, lat = float(fields[0]), float(fields[1])
    except ValueError:
        return None
    if not (math.isfinite(lon) and math.isfinite(lat)):
        logger.debug("Dropping non-finite coordinate token %r", token)
        return None
    return (lon, lat)


# ---------------------------------------------------------------------------
# KML colour decoding
# ---------------------------------------------------------------------------


def parse_kml_color(kml_color: str) -> RGBA | None:
    """Decode a KML ``aabbggrr`` colour string to ``(r, g, b, a)``.

    Returns ``None`` when the string is not exactly eight hex digits;
    callers substitute the fallback colour.
    """
    value = kml_color.strip()
    if len(value) != KML_COLOR_LENGTH:
        return None
    try:
        alpha, blue, green, red = (int(value[i : i + 2], 16) for i in range(0, 8, 2))
    except ValueError:
        return None
    return (red, green, blue, alpha)


def build_style_table(
    styles: Iterable[tuple[str, str]],
) -> tuple[Mapping[str, RGBA], tuple[str, ...]]:
    """Build the style lookup from ``(style_id, kml_color)`` pairs.

    Keys carry the ``#`` sigil so they match Placemark ``styleUrl`` values.
    Later duplicates overwrite earlier ones.

    Returns:
        A read-only mapping and the style references whose colour was
        malformed (decoded to ``INVALID_COLOR_RGBA``).
    """
    table: dict[str, RGBA] = {}
    invalid: dict[str, None] = {}
    for style_id, kml_color in styles:
        key = f"{STYLE_REF_SIGIL}{style_id}"
        rgba = parse_kml_color(kml_color)
        if rgba is None:
            logger.warning("Invalid KML color %r for style %s, using fallback", kml_color, key)
            invalid[key] = None
            rgba = INVALID_COLOR_RGBA
        else:
            invalid.pop(key, None)
        table[key] = rgba
    return MappingProxyType(table), tuple(invalid)
