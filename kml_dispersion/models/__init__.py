"""Data models and schemas.

Defines the data structures used throughout the pipeline:
- KmlDocument / Folder / Placemark: Parsed dispersion KML structure
- BoundingBox / Segment: One georeferenced overlay per time step
- ExtractionResult: Ordered segment series plus non-fatal warnings
"""

from kml_dispersion.models.document import (
    RGBA,
    Folder,
    KmlDocument,
    Placemark,
    Ring,
)
from kml_dispersion.models.segment import (
    BoundingBox,
    ExtractionResult,
    ExtractionWarning,
    Segment,
    WarningCode,
)

__all__ = [
    "RGBA",
    "BoundingBox",
    "ExtractionResult",
    "ExtractionWarning",
    "Folder",
    "KmlDocument",
    "Placemark",
    "Ring",
    "Segment",
    "WarningCode",
]
