"""Segment rasterization activity — render one folder to a PNG data URI.

Every placemark of the folder is drawn, in document order, onto a fresh
transparent ``size`` × ``size`` RGBA canvas:

1. **Resolve** the fill colour from the style table (fallback: translucent
   red when the ``styleUrl`` is missing or unknown).
2. **Project** each outer ring through the folder's ``CanvasProjection``.
3. **Fill** the ring with ``rasterio.features.rasterize`` and composite the
   colour over the canvas (source-over, so later placemarks paint over
   earlier ones).
4. **Stroke** the ring outline in the fixed outline colour when enabled.

The canvas is then written as PNG through a ``rasterio.io.MemoryFile`` and
base64-encoded behind a ``data:image/png;base64,`` prefix.
"""

from __future__ import annotations

import base64
import logging
import warnings
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from kml_dispersion.core.constants import (
    DEFAULT_STROKE_WIDTH,
    FALLBACK_FILL_RGBA,
    OUTLINE_RGBA,
    PNG_DATA_URI_PREFIX,
)
from kml_dispersion.core.exceptions import PermanentError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray
    from shapely.geometry.base import BaseGeometry

    from kml_dispersion.models.document import RGBA, Folder
    from kml_dispersion.utils.projection import CanvasProjection

logger = logging.getLogger("kml_dispersion.activities.rasterize_segment")

# A ring needs three distinct vertices to enclose any area
MIN_RING_VERTICES = 3


class RasterizeError(PermanentError):
    """Raised when a folder's canvas cannot be rendered or encoded."""

    default_stage = "rasterize_segment"
    default_code = "RASTERIZE_FAILED"


@dataclass(frozen=True, slots=True)
class SegmentRaster:
    """Rendered canvas for one folder.

    Attributes:
        data_uri: ``data:image/png;base64,...`` encoded PNG.
        fallback_styles: Style references (per placemark, in order) that
            could not be resolved and were filled with the fallback colour.
        rings_drawn: Number of rings rasterized.
    """

    data_uri: str
    fallback_styles: list[str] = field(default_factory=list)
    rings_drawn: int = 0


def rasterize_segment(
    folder: Folder,
    styles: Mapping[str, RGBA],
    projection: CanvasProjection,
    *,
    stroke_outline: bool = False,
    stroke_width: float = DEFAULT_STROKE_WIDTH,
) -> SegmentRaster:
    """Render every styled polygon of ``folder`` and encode the canvas.

    Args:
        folder: The folder being rendered.
        styles: Read-only style table (``"#id"`` → RGBA).
        projection: The folder's own geographic → pixel map.
        stroke_outline: Also stroke each ring in ``OUTLINE_RGBA``.
        stroke_width: Outline width in pixels.

    Returns:
        The encoded canvas and the unresolved style references.

    Raises:
        RasterizeError: If rasterization or PNG encoding fails.
    """
    size = projection.size
    canvas = new_canvas(size)
    fallback_styles: list[str] = []
    rings_drawn = 0

    for placemark in folder.placemarks:
        fill = styles.get(placemark.style_url)
        if fill is None:
            fallback_styles.append(placemark.style_url)
            fill = FALLBACK_FILL_RGBA

        for ring in placemark.rings:
            if len(set(ring)) < MIN_RING_VERTICES:
                logger.debug(
                    "Skipping ring with %d distinct vertex(es) in placemark %r of folder %r",
                    len(set(ring)),
                    placemark.name,
                    folder.name,
                )
                continue
            pixels = projection.project_ring(ring)
            fill_path(canvas, pixels, fill)
            if stroke_outline:
                stroke_path(canvas, pixels, OUTLINE_RGBA, width=stroke_width)
            rings_drawn += 1

    data_uri = PNG_DATA_URI_PREFIX + base64.b64encode(encode_png(canvas)).decode("ascii")
    return SegmentRaster(data_uri=data_uri, fallback_styles=fallback_styles, rings_drawn=rings_drawn)


# ---------------------------------------------------------------------------
# Drawing surface
# ---------------------------------------------------------------------------


def new_canvas(size: int) -> NDArray[np.float64]:
    """Return a transparent ``(size, size, 4)`` canvas with straight alpha in 0..1."""
    return np.zeros((size, size, 4), dtype=np.float64)


def fill_path(
    canvas: NDArray[np.float64],
    pixels: list[tuple[float, float]],
    rgba: RGBA,
) -> None:
    """Fill the closed path through ``pixels`` with ``rgba``.

    Raises:
        RasterizeError: If the path does not form a valid polygon.
    """
    from shapely.errors import GEOSException
    from shapely.geometry import Polygon

    try:
        polygon = Polygon(pixels)
    except (GEOSException, ValueError) as exc:
        msg = f"Cannot build polygon from {len(pixels)} vertices: {exc}"
        raise RasterizeError(msg) from exc
    _composite(canvas, _burn(polygon, canvas.shape[0], all_touched=False), rgba)


def stroke_path(
    canvas: NDArray[np.float64],
    pixels: list[tuple[float, float]],
    rgba: RGBA,
    *,
    width: float = DEFAULT_STROKE_WIDTH,
) -> None:
    """Stroke the closed path through ``pixels`` at ``width`` pixels.

    Raises:
        RasterizeError: If the path does not form a valid outline.
    """
    from shapely.errors import GEOSException
    from shapely.geometry import LineString

    try:
        outline = LineString([*pixels, pixels[0]])
        if width > 1.0:
            outline = outline.buffer(width / 2.0)
    except (GEOSException, ValueError) as exc:
        msg = f"Cannot build outline from {len(pixels)} vertices: {exc}"
        raise RasterizeError(msg) from exc
    _composite(canvas, _burn(outline, canvas.shape[0], all_touched=width <= 1.0), rgba)


def encode_png(canvas: NDArray[np.float64]) -> bytes:
    """Encode the canvas as an RGBA PNG.

    Raises:
        RasterizeError: If GDAL cannot write the PNG.
    """
    from rasterio.errors import NotGeoreferencedWarning, RasterioError
    from rasterio.io import MemoryFile

    size = canvas.shape[0]
    bands = np.rint(canvas * 255.0).astype(np.uint8).transpose(2, 0, 1)

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", NotGeoreferencedWarning)
            with MemoryFile() as memfile:
                with memfile.open(
                    driver="PNG",
                    width=size,
                    height=size,
                    count=4,
                    dtype="uint8",
                ) as dst:
                    dst.write(bands)
                memfile.seek(0)
                return memfile.read()
    except RasterioError as exc:
        msg = f"PNG encoding failed: {exc}"
        raise RasterizeError(msg) from exc


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _burn(geometry: BaseGeometry, size: int, *, all_touched: bool) -> NDArray[np.bool_]:
    """Rasterize a pixel-space geometry to a boolean coverage mask."""
    from rasterio.errors import NotGeoreferencedWarning
    from rasterio.features import rasterize

    if geometry.is_empty:
        return np.zeros((size, size), dtype=bool)

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", NotGeoreferencedWarning)
            burned = rasterize(
                [(geometry, 1)],
                out_shape=(size, size),
                fill=0,
                all_touched=all_touched,
                dtype="uint8",
            )
    except ValueError as exc:
        msg = f"Cannot rasterize {geometry.geom_type}: {exc}"
        raise RasterizeError(msg) from exc
    return burned.astype(bool)


def _composite(canvas: NDArray[np.float64], mask: NDArray[np.bool_], rgba: RGBA) -> None:
    """Paint ``rgba`` over the masked pixels with straight-alpha Porter-Duff "over".

    ``a_out = a_s + a_d(1 - a_s)`` and
    ``C_out = (C_s a_s + C_d a_d (1 - a_s)) / a_out`` (0 where ``a_out`` is 0).
    """
    if not mask.any():
        return

    src_rgb = np.asarray(rgba[:3], dtype=np.float64) / 255.0
    src_a = rgba[3] / 255.0

    dst = canvas[mask]
    dst_a = dst[:, 3]
    out_a = src_a + dst_a * (1.0 - src_a)

    weighted = src_rgb * src_a + dst[:, :3] * (dst_a * (1.0 - src_a))[:, np.newaxis]
    safe_a = np.where(out_a > 0, out_a, 1.0)[:, np.newaxis]
    out_rgb = np.where(out_a[:, np.newaxis] > 0, weighted / safe_a, 0.0)

    canvas[mask] = np.column_stack([out_rgb, out_a])
