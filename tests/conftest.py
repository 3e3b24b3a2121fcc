"""Shared pytest fixtures for the KML Dispersion test suite."""

from __future__ import annotations

import base64
import struct
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Path fixtures
# ---------------------------------------------------------------------------

TESTS_DIR = Path(__file__).parent
DATA_DIR = TESTS_DIR / "data"
EDGE_CASES_DIR = DATA_DIR / "edge_cases"

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture()
def data_dir() -> Path:
    """Return the path to the test data directory."""
    return DATA_DIR


@pytest.fixture()
def edge_cases_dir() -> Path:
    """Return the path to the edge-cases test data directory."""
    return EDGE_CASES_DIR


# ---------------------------------------------------------------------------
# Sample KML file fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def hysplit_kml(data_dir: Path) -> Path:
    """Path to a HYSPLIT-style KML with two concentration folders, out of time order."""
    return data_dir / "01_hysplit_concentration.kml"


@pytest.fixture()
def not_xml_kml(edge_cases_dir: Path) -> Path:
    """Path to a file that is not valid XML."""
    return edge_cases_dir / "11_malformed_not_xml.kml"


@pytest.fixture()
def truncated_kml(edge_cases_dir: Path) -> Path:
    """Path to a KML document cut off before its closing tag."""
    return edge_cases_dir / "12_truncated.kml"


@pytest.fixture()
def empty_kml(edge_cases_dir: Path) -> Path:
    """Path to a whitespace-only file."""
    return edge_cases_dir / "13_empty.kml"


@pytest.fixture()
def no_document_kml(edge_cases_dir: Path) -> Path:
    """Path to a KML without a <Document> element."""
    return edge_cases_dir / "14_no_document.kml"


@pytest.fixture()
def degenerate_kml(edge_cases_dir: Path) -> Path:
    """Path to a KML with a single-point folder, an unparsable folder and one good folder."""
    return edge_cases_dir / "15_degenerate_folders.kml"


# ---------------------------------------------------------------------------
# In-memory KML builders
# ---------------------------------------------------------------------------

#: (name, time_begin, [(style_url, [coordinate_text, ...]), ...])
FolderLayout = tuple[str, str, Sequence[tuple[str, Sequence[str]]]]


def _build_kml(
    folders: Sequence[FolderLayout],
    styles: Sequence[tuple[str, str]] = (),
    *,
    namespaced: bool = True,
) -> bytes:
    ns = ' xmlns="http://www.opengis.net/kml/2.2"' if namespaced else ""
    parts = [f'<?xml version="1.0" encoding="UTF-8"?>\n<kml{ns}><Document>']
    for style_id, color in styles:
        parts.append(f'<Style id="{style_id}"><PolyStyle><color>{color}</color></PolyStyle></Style>')
    for name, time_begin, placemarks in folders:
        parts.append(f"<Folder><name>{name}</name>")
        if time_begin:
            parts.append(f"<TimeSpan><begin>{time_begin}</begin></TimeSpan>")
        for style_url, rings in placemarks:
            parts.append("<Placemark>")
            if style_url:
                parts.append(f"<styleUrl>{style_url}</styleUrl>")
            parts.append("<MultiGeometry>")
            for coords in rings:
                parts.append(
                    "<Polygon><outerBoundaryIs><LinearRing>"
                    f"<coordinates>{coords}</coordinates>"
                    "</LinearRing></outerBoundaryIs></Polygon>"
                )
            parts.append("</MultiGeometry></Placemark>")
        parts.append("</Folder>")
    parts.append("</Document></kml>")
    return "\n".join(parts).encode("utf-8")


@pytest.fixture()
def build_kml() -> Callable[..., bytes]:
    """Return a builder producing KML bytes from folder layouts."""
    return _build_kml


# ---------------------------------------------------------------------------
# PNG helpers
# ---------------------------------------------------------------------------


def _decode_data_uri(data_uri: str) -> bytes:
    prefix = "data:image/png;base64,"
    assert data_uri.startswith(prefix)
    return base64.b64decode(data_uri[len(prefix) :])


def _png_dimensions(png: bytes) -> tuple[int, int]:
    """Read (width, height) from the IHDR chunk."""
    assert png[:8] == PNG_SIGNATURE
    assert png[12:16] == b"IHDR"
    width, height = struct.unpack(">II", png[16:24])
    return width, height


@pytest.fixture()
def decode_data_uri() -> Callable[[str], bytes]:
    """Return a helper decoding a PNG data URI to raw bytes."""
    return _decode_data_uri


@pytest.fixture()
def png_dimensions() -> Callable[[bytes], tuple[int, int]]:
    """Return a helper reading PNG dimensions from the IHDR chunk."""
    return _png_dimensions
