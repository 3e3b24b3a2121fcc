"""Segment extraction configuration loaded from environment variables.

All configuration values have defaults matching the HYSPLIT overlay
contract (1024 px canvases, fill-only rendering, ``Concentration``
folders).  Azure Functions app settings (or ``local.settings.json`` for
local dev) are the source of truth.

``from_env()`` raises ``ConfigValidationError`` if any value is out of
its valid range, so bad configuration is caught at startup rather than
halfway through a document.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from kml_dispersion.core.constants import (
    DEFAULT_CANVAS_SIZE,
    DEFAULT_FOLDER_FILTER,
    DEFAULT_STROKE_WIDTH,
)
from kml_dispersion.core.exceptions import PipelineError

MAX_CANVAS_SIZE = 8192

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off", ""})


class ConfigValidationError(PipelineError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class SegmentConfig:
    """Immutable segment extraction configuration.

    Loaded once at startup and threaded through the aggregator into
    every folder's rasterization.

    Attributes:
        canvas_size: Side length in pixels of each square PNG canvas.
        stroke_outline: Whether polygon rings are also stroked in the
            fixed outline colour after being filled.
        stroke_width: Outline width in pixels (used when ``stroke_outline``).
        folder_filter: Substring a folder name must contain to qualify.
        max_workers: Number of folders rasterized concurrently.
    """

    canvas_size: int = DEFAULT_CANVAS_SIZE
    stroke_outline: bool = False
    stroke_width: float = DEFAULT_STROKE_WIDTH
    folder_filter: str = DEFAULT_FOLDER_FILTER
    max_workers: int = 1

    @classmethod
    def from_env(cls) -> SegmentConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range, or a
                boolean setting is not a recognised word.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``SEGMENT_CANVAS_SIZE=abc``).
        """
        config = cls(
            canvas_size=int(os.getenv("SEGMENT_CANVAS_SIZE", str(DEFAULT_CANVAS_SIZE))),
            stroke_outline=_parse_bool(
                "SEGMENT_STROKE_OUTLINE", os.getenv("SEGMENT_STROKE_OUTLINE", "false")
            ),
            stroke_width=float(os.getenv("SEGMENT_STROKE_WIDTH", str(DEFAULT_STROKE_WIDTH))),
            folder_filter=os.getenv("SEGMENT_FOLDER_FILTER", DEFAULT_FOLDER_FILTER),
            max_workers=int(os.getenv("SEGMENT_MAX_WORKERS", "1")),
        )
        validate_config(config)
        return config


def _parse_bool(key: str, raw: str) -> bool:
    word = raw.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ConfigValidationError(key, raw, "must be one of true/false, yes/no, on/off, 1/0")


def validate_config(config: SegmentConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not 1 <= config.canvas_size <= MAX_CANVAS_SIZE:
        raise ConfigValidationError(
            "SEGMENT_CANVAS_SIZE",
            config.canvas_size,
            f"must be between 1 and {MAX_CANVAS_SIZE} (pixels)",
        )

    if config.stroke_width <= 0:
        raise ConfigValidationError(
            "SEGMENT_STROKE_WIDTH",
            config.stroke_width,
            "must be > 0 (pixels)",
        )

    if not config.folder_filter:
        raise ConfigValidationError(
            "SEGMENT_FOLDER_FILTER",
            config.folder_filter,
            "must not be empty",
        )

    if config.max_workers < 1:
        raise ConfigValidationError(
            "SEGMENT_MAX_WORKERS",
            config.max_workers,
            "must be >= 1",
        )
