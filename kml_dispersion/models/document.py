"""Data model for a parsed dispersion KML document.

A ``KmlDocument`` is the output of the parse_kml activity: the style
table decoded once, plus the folders in document order.  Each folder is
one simulated time step holding the concentration contour placemarks.

These objects are transient: they are built fresh per run and discarded
once the folder's segment has been produced (or the folder skipped).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

#: Colour as ``(red, green, blue, alpha)``, each 0-255.
RGBA = tuple[int, int, int, int]

#: A single closed outer ring of ``(lon, lat)`` vertices.
Ring = list[tuple[float, float]]


@dataclass(frozen=True, slots=True)
class Placemark:
    """A styled polygon feature within a folder.

    Attributes:
        name: Placemark name (diagnostics only).
        style_url: Style reference as written in the document
            (e.g. ``"#conc1"``); empty if absent.
        rings: Outer boundary rings, one per ``<Polygon>``.
    """

    name: str = ""
    style_url: str = ""
    rings: list[Ring] = field(default_factory=list)

    @property
    def vertex_count(self) -> int:
        """Total number of vertices across all rings."""
        return sum(len(ring) for ring in self.rings)


@dataclass(frozen=True, slots=True)
class Folder:
    """One named time step of the dispersion output.

    Attributes:
        name: Folder name (e.g. ``"Concentration (Valid:20240101 1200)"``).
        time_begin: Raw ``TimeSpan/begin`` text, empty if absent.
        placemarks: Placemarks in document order.
    """

    name: str
    time_begin: str = ""
    placemarks: list[Placemark] = field(default_factory=list)

    def iter_vertices(self) -> list[tuple[float, float]]:
        """Return every vertex of every ring in the folder, in order."""
        return [pt for pm in self.placemarks for ring in pm.rings for pt in ring]


@dataclass(frozen=True, slots=True)
class KmlDocument:
    """A parsed dispersion KML document.

    Attributes:
        styles: Read-only lookup from style reference (``"#<id>"``) to
            fill colour.  Built once and shared by all folders.
        folders: Top-level folders in document order.
        invalid_styles: Style references whose colour string was
            malformed and decoded to the fallback colour.
        source_file: Name of the source KML file, if known.
    """

    styles: Mapping[str, RGBA] = field(default_factory=lambda: MappingProxyType({}))
    folders: list[Folder] = field(default_factory=list)
    invalid_styles: tuple[str, ...] = ()
    source_file: str = ""
