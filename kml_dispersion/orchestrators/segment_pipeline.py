"""Segment aggregation pipeline for a parsed dispersion KML document.

Coordinates the per-folder steps and assembles the output series:

1. Filter — only folders whose name contains ``config.folder_filter``
2. Bounding box — over every parsed vertex of the folder
3. Projection — the folder's own web-Mercator canvas map
4. Rasterize — fill (and optionally stroke) each placemark's rings
5. Timestamp — ordered strategies with a wall-clock fallback
6. Fan-in — stable sort by ascending timestamp

Folders are independent: a failure in one (degenerate bounding box,
unprojectable latitude, encoding error) is recorded as a warning and
the remaining folders are still processed.  With ``max_workers > 1`` the
folders are rendered on a thread pool; results are collected back in
document order before sorting, so equal timestamps keep document order.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from kml_dispersion.activities.parse_kml import parse_kml_file
from kml_dispersion.activities.rasterize_segment import rasterize_segment
from kml_dispersion.activities.resolve_timestamp import resolve_timestamp
from kml_dispersion.core.config import SegmentConfig
from kml_dispersion.core.exceptions import PipelineError
from kml_dispersion.models.segment import (
    ExtractionResult,
    ExtractionWarning,
    Segment,
    WarningCode,
)
from kml_dispersion.utils.projection import (
    CanvasProjection,
    DegenerateBoundingBoxError,
    compute_bounding_box,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from datetime import datetime
    from pathlib import Path

    from kml_dispersion.models.document import RGBA, Folder, KmlDocument

logger = logging.getLogger("kml_dispersion.orchestrators.segment_pipeline")


@dataclass(slots=True)
class _FolderOutcome:
    """Segment (if any) and warnings produced by one folder."""

    segment: Segment | None = None
    warnings: list[ExtractionWarning] = field(default_factory=list)


def extract_segments(
    document: KmlDocument,
    config: SegmentConfig | None = None,
    *,
    clock: Callable[[], datetime] | None = None,
) -> ExtractionResult:
    """Build the time-ordered segment series for a parsed document.

    Args:
        document: The decoded KML document.
        config: Extraction settings (defaults to ``SegmentConfig()``).
        clock: Current-time source for the timestamp fallback.

    Returns:
        Segments sorted ascending by ``t`` (stable) and every warning
        recorded along the way.
    """
    config = config or SegmentConfig()
    start_time = time.monotonic()

    warnings: list[ExtractionWarning] = [
        ExtractionWarning(
            code=WarningCode.INVALID_COLOR,
            message=f"Style {style_ref} has a malformed colour; using fallback",
        )
        for style_ref in document.invalid_styles
    ]

    qualifying = [f for f in document.folders if config.folder_filter in f.name]

    logger.info(
        "extract_segments started | file=%s | folders=%d | qualifying=%d | "
        "stroke_outline=%s | workers=%d",
        document.source_file,
        len(document.folders),
        len(qualifying),
        config.stroke_outline,
        config.max_workers,
    )

    def _run(folder: Folder) -> _FolderOutcome:
        return _process_folder(folder, document.styles, config, clock=clock)

    if config.max_workers > 1 and len(qualifying) > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
            outcomes = list(pool.map(_run, qualifying))
    else:
        outcomes = [_run(folder) for folder in qualifying]

    segments: list[Segment] = []
    for outcome in outcomes:
        warnings.extend(outcome.warnings)
        if outcome.segment is not None:
            segments.append(outcome.segment)

    # sorted() is stable: equal timestamps keep document order
    segments = sorted(segments, key=lambda s: s.t)

    logger.info(
        "extract_segments completed | file=%s | segments=%d | warnings=%d | duration=%.2fs",
        document.source_file,
        len(segments),
        len(warnings),
        time.monotonic() - start_time,
    )

    return ExtractionResult(segments=segments, warnings=warnings)


def process_kml_file(
    kml_path: Path | str,
    config: SegmentConfig | None = None,
    *,
    clock: Callable[[], datetime] | None = None,
) -> ExtractionResult:
    """Read, decode and aggregate a KML file in one call.

    Raises:
        KmlParseError: If the file cannot be read or decoded (fatal).
    """
    return extract_segments(parse_kml_file(kml_path), config, clock=clock)


# ---------------------------------------------------------------------------
# Per-folder processing
# ---------------------------------------------------------------------------


def _process_folder(
    folder: Folder,
    styles: Mapping[str, RGBA],
    config: SegmentConfig,
    *,
    clock: Callable[[], datetime] | None,
) -> _FolderOutcome:
    """Build one folder's segment; recoverable failures become warnings."""
    outcome = _FolderOutcome()

    vertices = folder.iter_vertices()
    if not vertices:
        logger.warning("Skipping folder %r: no parsable vertices", folder.name)
        outcome.warnings.append(
            ExtractionWarning(
                code=WarningCode.EMPTY_FOLDER,
                folder=folder.name,
                message="Folder has no parsable vertices",
            )
        )
        return outcome

    bbox = compute_bounding_box(vertices)

    try:
        projection = CanvasProjection.from_bbox(bbox, config.canvas_size)
        raster = rasterize_segment(
            folder,
            styles,
            projection,
            stroke_outline=config.stroke_outline,
            stroke_width=config.stroke_width,
        )
    except DegenerateBoundingBoxError as exc:
        logger.warning("Skipping folder %r: %s", folder.name, exc)
        outcome.warnings.append(
            ExtractionWarning(code=WarningCode.DEGENERATE_BBOX, folder=folder.name, message=str(exc))
        )
        return outcome
    except PipelineError as exc:
        logger.warning(
            "Skipping folder %r | stage=%s | code=%s | error=%s",
            folder.name,
            exc.stage,
            exc.code,
            exc,
        )
        outcome.warnings.append(
            ExtractionWarning(code=WarningCode.SEGMENT_FAILED, folder=folder.name, message=str(exc))
        )
        return outcome

    for style_ref in raster.fallback_styles:
        logger.warning(
            "Unresolved style %r in folder %r, using fallback fill", style_ref, folder.name
        )
        outcome.warnings.append(
            ExtractionWarning(
                code=WarningCode.FALLBACK_STYLE,
                folder=folder.name,
                message=f"Style reference {style_ref!r} not found; using fallback fill",
            )
        )

    resolved = resolve_timestamp(folder, clock=clock)
    if resolved.is_fallback:
        outcome.warnings.append(
            ExtractionWarning(
                code=WarningCode.FALLBACK_TIMESTAMP,
                folder=folder.name,
                message="No TimeSpan or Valid: stamp found; using processing time",
            )
        )

    outcome.segment = Segment(t=resolved.epoch, bbox=bbox, base64=raster.data_uri)

    logger.debug(
        "Built segment | folder=%r | t=%d | strategy=%s | rings=%d",
        folder.name,
        resolved.epoch,
        resolved.strategy,
        raster.rings_drawn,
    )
    return outcome
