"""Azure Functions entry point — KML Dispersion Segment Extraction.

This module registers the HTTP functions using the Python v2 programming
model.

All business logic lives in the kml_dispersion package. This file is purely
the wiring layer between Azure Functions bindings and application code.
"""

from __future__ import annotations

import logging

import azure.functions as func

from kml_dispersion.core.config import SegmentConfig
from kml_dispersion.core.ingress import handle_segments_request

app = func.FunctionApp(http_auth_level=func.AuthLevel.FUNCTION)

logger = logging.getLogger("kml_dispersion.function_app")

# Loaded once at startup; invalid settings fail the host before any request.
CONFIG = SegmentConfig.from_env()


# ---------------------------------------------------------------------------
# HTTP: KML → segment series
# ---------------------------------------------------------------------------


@app.function_name("extract_segments")
@app.route(route="segments", methods=["POST"])
def extract_segments_http(req: func.HttpRequest) -> func.HttpResponse:
    """Convert a posted HYSPLIT KML document into the segment series.

    Body:
        The raw KML document, or JSON ``{"kml": "...", "filename": "..."}``
        with ``Content-Type: application/json``.

    Returns:
        200 with ``{"segments": [...], "warnings": [...]}``, or 400 with a
        structured error payload when the document is rejected.
    """
    content_type = req.headers.get("Content-Type", "")

    logger.info(
        "extract_segments request | content_type=%s | bytes=%d",
        content_type,
        len(req.get_body() or b""),
    )

    status_code, body = handle_segments_request(req.get_body(), content_type, CONFIG)

    logger.info("extract_segments response | status=%d", status_code)

    return func.HttpResponse(body, status_code=status_code, mimetype="application/json")


# ---------------------------------------------------------------------------
# HTTP: Health check
# ---------------------------------------------------------------------------


@app.function_name("health")
@app.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health(req: func.HttpRequest) -> func.HttpResponse:
    """Static liveness response."""
    return func.HttpResponse("ok", status_code=200, mimetype="text/plain")
