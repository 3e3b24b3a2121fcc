"""Shared pipeline constants — single source of truth.

Centralises the raster geometry, fallback colours and output encoding
literals used by the parser, the rasterizer and the aggregator.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Folder selection
# ---------------------------------------------------------------------------

DEFAULT_FOLDER_FILTER: str = "Concentration"
"""Substring a folder name must contain to produce a segment."""

# ---------------------------------------------------------------------------
# Projection and canvas
# ---------------------------------------------------------------------------

MERCATOR_TILE_SIZE: float = 256.0
"""Web-Mercator world size in projected units for one full longitude wrap."""

DEFAULT_CANVAS_SIZE: int = 1024
"""Side length in pixels of every square segment canvas."""

# ---------------------------------------------------------------------------
# Colours (RGBA, 0-255)
# ---------------------------------------------------------------------------

FALLBACK_FILL_RGBA: tuple[int, int, int, int] = (255, 0, 0, 128)
"""Fill used when a placemark's style reference cannot be resolved."""

INVALID_COLOR_RGBA: tuple[int, int, int, int] = (0, 0, 0, 255)
"""Fill used when a style's KML colour string is malformed."""

OUTLINE_RGBA: tuple[int, int, int, int] = (0, 0, 0, 255)
"""Outline colour used when polygon stroking is enabled."""

DEFAULT_STROKE_WIDTH: float = 1.0

# ---------------------------------------------------------------------------
# Output encoding
# ---------------------------------------------------------------------------

PNG_DATA_URI_PREFIX: str = "data:image/png;base64,"
