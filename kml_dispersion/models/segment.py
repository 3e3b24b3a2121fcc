"""Pydantic output models for the segment series.

Each qualifying KML folder becomes one ``Segment``: a Unix-epoch
timestamp, the folder's geographic bounding box and a PNG data URI.
The aggregator returns the ordered series together with the list of
non-fatal warnings raised while building it, so callers never need to
scrape a log to learn which folders were skipped or which fallbacks
were used.

Output record shape (one per segment)::

    {"t": 1704110400,
     "bbox": {"west": -100.0, "south": 40.0, "east": -99.0, "north": 41.0},
     "base64": "data:image/png;base64,iVBORw0..."}
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field


class WarningCode(str, enum.Enum):
    """Kinds of recoverable condition recorded during extraction."""

    FALLBACK_STYLE = "FALLBACK_STYLE"
    INVALID_COLOR = "INVALID_COLOR"
    EMPTY_FOLDER = "EMPTY_FOLDER"
    DEGENERATE_BBOX = "DEGENERATE_BBOX"
    FALLBACK_TIMESTAMP = "FALLBACK_TIMESTAMP"
    SEGMENT_FAILED = "SEGMENT_FAILED"


class BoundingBox(BaseModel):
    """Axis-aligned geographic extent in WGS 84 degrees."""

    west: float
    south: float
    east: float
    north: float

    model_config = {"frozen": True}

    @property
    def width(self) -> float:
        return self.east - self.west

    @property
    def height(self) -> float:
        return self.north - self.south

    @property
    def is_degenerate(self) -> bool:
        """Whether the box has zero width or zero height."""
        return self.width <= 0 or self.height <= 0


class Segment(BaseModel):
    """One time step of the overlay series.

    Attributes:
        t: Timestamp in whole seconds since the Unix epoch.
        bbox: Bounding box of every vertex in the folder.
        base64: ``data:image/png;base64,`` URI of the rendered canvas.
    """

    t: int
    bbox: BoundingBox
    base64: str

    model_config = {"frozen": True}

    def to_dict(self) -> dict[str, object]:
        """Serialise to the public output record."""
        return self.model_dump()  # type: ignore[return-value]


class ExtractionWarning(BaseModel):
    """A recoverable condition encountered while processing a folder.

    Attributes:
        code: Machine-readable warning kind.
        folder: Name of the folder concerned (empty for document-level
            warnings such as a malformed style colour).
        message: Human-readable description.
    """

    code: WarningCode
    folder: str = ""
    message: str = ""

    model_config = {"frozen": True}


class ExtractionResult(BaseModel):
    """The ordered segment series plus the warnings raised building it."""

    segments: list[Segment] = Field(default_factory=list)
    warnings: list[ExtractionWarning] = Field(default_factory=list)

    def to_records(self) -> list[dict[str, object]]:
        """Return the segment series as plain output records."""
        return [segment.to_dict() for segment in self.segments]

    def to_dict(self) -> dict[str, object]:
        """Serialise segments and warnings (for HTTP responses)."""
        return self.model_dump(mode="json")  # type: ignore[return-value]

    def to_json(self, *, indent: int | None = None) -> str:
        return self.model_dump_json(indent=indent)

    def warnings_for(self, code: WarningCode) -> list[ExtractionWarning]:
        """Return the warnings of a single kind, in the order recorded."""
        return [w for w in self.warnings if w.code == code]
