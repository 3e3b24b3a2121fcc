"""Tests for segment extraction configuration.

Covers:
- Default values match the overlay contract (1024 px, fill-only)
- Loading from environment variables
- Type coercion (string env vars → numeric / boolean fields)
- Fail-fast range validation
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from kml_dispersion.core.config import (
    MAX_CANVAS_SIZE,
    ConfigValidationError,
    SegmentConfig,
    validate_config,
)
from kml_dispersion.core.exceptions import PipelineError


class TestSegmentConfigDefaults:
    """Verify default configuration values."""

    def test_default_canvas_size(self) -> None:
        assert SegmentConfig().canvas_size == 1024

    def test_fill_only_by_default(self) -> None:
        cfg = SegmentConfig()
        assert cfg.stroke_outline is False
        assert cfg.stroke_width == 1.0

    def test_default_folder_filter(self) -> None:
        assert SegmentConfig().folder_filter == "Concentration"

    def test_sequential_by_default(self) -> None:
        assert SegmentConfig().max_workers == 1


class TestSegmentConfigFromEnv:
    """Verify loading from environment variables."""

    def test_loads_from_environment(self) -> None:
        """All env vars are read and coerced to correct types."""
        env = {
            "SEGMENT_CANVAS_SIZE": "512",
            "SEGMENT_STROKE_OUTLINE": "true",
            "SEGMENT_STROKE_WIDTH": "2.5",
            "SEGMENT_FOLDER_FILTER": "Deposition",
            "SEGMENT_MAX_WORKERS": "4",
        }
        with patch.dict(os.environ, env, clear=False):
            cfg = SegmentConfig.from_env()

        assert cfg.canvas_size == 512
        assert cfg.stroke_outline is True
        assert cfg.stroke_width == 2.5
        assert cfg.folder_filter == "Deposition"
        assert cfg.max_workers == 4

    def test_defaults_when_env_missing(self) -> None:
        """Missing environment variables fall back to defaults."""
        with patch.dict(os.environ, {}, clear=True):
            cfg = SegmentConfig.from_env()

        assert cfg == SegmentConfig()

    @pytest.mark.parametrize("word", ["1", "TRUE", "yes", " On "])
    def test_true_words(self, word: str) -> None:
        with patch.dict(os.environ, {"SEGMENT_STROKE_OUTLINE": word}, clear=True):
            assert SegmentConfig.from_env().stroke_outline is True

    @pytest.mark.parametrize("word", ["0", "False", "no", "off", ""])
    def test_false_words(self, word: str) -> None:
        with patch.dict(os.environ, {"SEGMENT_STROKE_OUTLINE": word}, clear=True):
            assert SegmentConfig.from_env().stroke_outline is False

    def test_frozen_immutability(self) -> None:
        """SegmentConfig is frozen (immutable)."""
        cfg = SegmentConfig()
        with pytest.raises(AttributeError):
            cfg.canvas_size = 2048  # type: ignore[misc]


class TestSegmentConfigValidation:
    """Fail-fast range validation in from_env."""

    def test_valid_defaults_pass(self) -> None:
        validate_config(SegmentConfig())

    def test_unknown_boolean_word_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"SEGMENT_STROKE_OUTLINE": "maybe"}, clear=True),
            pytest.raises(ConfigValidationError, match="SEGMENT_STROKE_OUTLINE"),
        ):
            SegmentConfig.from_env()

    def test_canvas_zero_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"SEGMENT_CANVAS_SIZE": "0"}, clear=True),
            pytest.raises(ConfigValidationError, match="SEGMENT_CANVAS_SIZE"),
        ):
            SegmentConfig.from_env()

    def test_canvas_too_large_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"SEGMENT_CANVAS_SIZE": str(MAX_CANVAS_SIZE + 1)}, clear=True),
            pytest.raises(ConfigValidationError, match="must be between"),
        ):
            SegmentConfig.from_env()

    def test_canvas_upper_bound_accepted(self) -> None:
        with patch.dict(os.environ, {"SEGMENT_CANVAS_SIZE": str(MAX_CANVAS_SIZE)}, clear=True):
            assert SegmentConfig.from_env().canvas_size == MAX_CANVAS_SIZE

    def test_non_numeric_canvas_raises_value_error(self) -> None:
        with (
            patch.dict(os.environ, {"SEGMENT_CANVAS_SIZE": "abc"}, clear=True),
            pytest.raises(ValueError, match="invalid literal"),
        ):
            SegmentConfig.from_env()

    def test_stroke_width_zero_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"SEGMENT_STROKE_WIDTH": "0"}, clear=True),
            pytest.raises(ConfigValidationError, match="must be > 0"),
        ):
            SegmentConfig.from_env()

    def test_empty_folder_filter_rejected(self) -> None:
        with pytest.raises(ConfigValidationError, match="must not be empty"):
            validate_config(SegmentConfig(folder_filter=""))

    def test_zero_workers_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"SEGMENT_MAX_WORKERS": "0"}, clear=True),
            pytest.raises(ConfigValidationError, match="SEGMENT_MAX_WORKERS"),
        ):
            SegmentConfig.from_env()

    def test_error_carries_key_and_value(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_config(SegmentConfig(stroke_width=-1.0))
        err = exc_info.value
        assert err.key == "SEGMENT_STROKE_WIDTH"
        assert err.value == -1.0
        assert isinstance(err, PipelineError)
        assert err.stage == "config"
        assert err.code == "CONFIG_VALIDATION_FAILED"
