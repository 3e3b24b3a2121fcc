"""Exception hierarchy for segment extraction.

Every error raised by the package derives from ``PipelineError`` and
names the stage and a stable code, so the two callers can treat them
uniformly:

- the aggregator catches ``PipelineError`` per folder and turns it into
  an ``ExtractionWarning`` (the folder is skipped, the run continues);
- the HTTP wrapper turns a fatal document error into a 400 response
  body via ``to_error_dict()``.

Categories
----------
- ``ValidationError``  — geometry or input that cannot be processed.
- ``PermanentError``   — rendering/encoding failure for a folder.
- ``ContractError``    — HTTP request body does not match the contract.

Extraction is a single pass over an in-memory document with no remote
calls, so nothing is retryable by default.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all extraction errors.

    Attributes:
        message: Human-readable error description.
        stage: Where the error occurred (``"parse_kml"``, ``"project"``,
            ``"rasterize_segment"``, ``"ingress"``, ``"config"``).
        code: Machine-readable error code (e.g. ``"KML_PARSE_FAILED"``).
        retryable: Whether repeating the same call could succeed.
        folder: Name of the KML folder being processed, if any.
    """

    default_stage: str = ""
    default_code: str = ""
    category: str = "permanent"

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        folder: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.folder = folder
        super().__init__(message)

    def to_error_dict(self) -> dict[str, object]:
        """Return the error as a JSON-ready payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "folder": self.folder,
        }


class ValidationError(PipelineError):
    """Geometry or input that cannot be processed as given."""

    category = "validation"


class PermanentError(PipelineError):
    """A folder could not be rendered or encoded."""

    category = "permanent"


class ContractError(PipelineError):
    """Request payload does not match the ingress contract."""

    category = "contract"
