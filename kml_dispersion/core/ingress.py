"""Thin ingress boundary helpers for the Azure Functions entry point.

Keeps ``function_app.py`` limited to trigger bindings and handoff:

- **extract_kml_payload** — normalises an HTTP request body to raw KML
  bytes.  The body is either the KML document itself or a JSON object
  ``{"kml": "<kml ...>", "filename": "..."}``.
- **handle_segments_request** — runs the segment pipeline on a request
  body and returns ``(status_code, json_body)`` without touching any
  Functions types, so it can be tested directly.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from kml_dispersion.core.exceptions import ContractError, PipelineError

if TYPE_CHECKING:
    from kml_dispersion.core.config import SegmentConfig

logger = logging.getLogger("kml_dispersion.core.ingress")

JSON_CONTENT_TYPE = "application/json"


def extract_kml_payload(body: bytes | None, content_type: str = "") -> tuple[bytes, str]:
    """Return ``(kml_bytes, filename)`` from an HTTP request body.

    Raises:
        ContractError: If the body is empty, or is JSON without a
            non-empty string ``kml`` field.
    """
    if not body or not body.strip():
        msg = "Request body is empty; expected a KML document"
        raise ContractError(msg, stage="ingress", code="EMPTY_BODY")

    if not content_type.lower().startswith(JSON_CONTENT_TYPE):
        return body, ""

    try:
        parsed = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        msg = f"Request body is not valid JSON: {exc}"
        raise ContractError(msg, stage="ingress", code="INVALID_JSON") from exc

    if not isinstance(parsed, dict):
        msg = f"Request JSON must be an object, got {type(parsed).__name__}"
        raise ContractError(msg, stage="ingress", code="INVALID_INPUT_TYPE")

    kml = parsed.get("kml")
    if not isinstance(kml, str) or not kml.strip():
        msg = "Request JSON must contain a non-empty string field 'kml'"
        raise ContractError(msg, stage="ingress", code="MISSING_KML_FIELD")

    return kml.encode("utf-8"), str(parsed.get("filename", ""))


def handle_segments_request(
    body: bytes | None,
    content_type: str = "",
    config: SegmentConfig | None = None,
) -> tuple[int, str]:
    """Run the segment pipeline for one HTTP request.

    Returns:
        ``(200, ExtractionResult JSON)`` on success, or ``(400, error JSON)``
        when the payload or KML document is rejected.
    """
    from kml_dispersion.activities.parse_kml import parse_kml_bytes
    from kml_dispersion.orchestrators.segment_pipeline import extract_segments

    try:
        content, filename = extract_kml_payload(body, content_type)
        document = parse_kml_bytes(content, source_filename=filename)
    except PipelineError as exc:
        logger.warning("Rejected segments request | code=%s | error=%s", exc.code, exc)
        return 400, json.dumps(exc.to_error_dict())

    result = extract_segments(document, config)
    return 200, result.to_json()
