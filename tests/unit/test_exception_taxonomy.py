"""Tests for the unified exception taxonomy.

Validates:
- PipelineError hierarchy and structured attributes
- Category classification (validation, permanent, contract)
- ``to_error_dict()`` produces stable payload keys
- All activity/config exceptions are PipelineError subclasses
"""

from __future__ import annotations

from typing import ClassVar

import pytest

from kml_dispersion.activities.parse_kml import KmlParseError, KmlValidationError
from kml_dispersion.activities.rasterize_segment import RasterizeError
from kml_dispersion.core.config import ConfigValidationError
from kml_dispersion.core.exceptions import (
    ContractError,
    PermanentError,
    PipelineError,
    ValidationError,
)
from kml_dispersion.utils.projection import DegenerateBoundingBoxError, ProjectionError


class TestPipelineErrorBase:
    """PipelineError base class behavior."""

    def test_default_attributes(self) -> None:
        err = PipelineError("boom")
        assert err.message == "boom"
        assert err.stage == ""
        assert err.code == ""
        assert err.retryable is False
        assert err.folder == ""

    def test_custom_attributes(self) -> None:
        err = PipelineError(
            "fail",
            stage="rasterize_segment",
            code="RASTERIZE_FAILED",
            retryable=True,
            folder="Concentration 1",
        )
        assert err.stage == "rasterize_segment"
        assert err.code == "RASTERIZE_FAILED"
        assert err.retryable is True
        assert err.folder == "Concentration 1"

    def test_str_is_message(self) -> None:
        assert str(PipelineError("human-readable error")) == "human-readable error"

    def test_to_error_dict_keys(self) -> None:
        d = PipelineError("x", stage="s", code="C").to_error_dict()
        assert set(d.keys()) == {"category", "code", "stage", "message", "retryable", "folder"}

    def test_base_category_is_permanent(self) -> None:
        assert PipelineError("x").category == "permanent"

    def test_folder_in_error_dict(self) -> None:
        err = PipelineError("x", folder="Concentration 1")
        assert err.to_error_dict()["folder"] == "Concentration 1"


class TestCategoryBases:
    """Category subclasses pin retryability and category."""

    @pytest.mark.parametrize(
        ("cls", "category"),
        [
            (ValidationError, "validation"),
            (PermanentError, "permanent"),
            (ContractError, "contract"),
        ],
    )
    def test_category(self, cls: type[PipelineError], category: str) -> None:
        err = cls("x")
        assert err.category == category
        assert err.retryable is False

    def test_contract_error_dict(self) -> None:
        err = ContractError("bad body", stage="ingress", code="EMPTY_BODY")
        assert err.to_error_dict() == {
            "category": "contract",
            "code": "EMPTY_BODY",
            "stage": "ingress",
            "message": "bad body",
            "retryable": False,
            "folder": "",
        }


class TestDomainExceptions:
    """Every domain exception slots into the taxonomy with its defaults."""

    EXPECTED: ClassVar[list[tuple[type[PipelineError], type[PipelineError], str, str]]] = [
        (KmlParseError, PipelineError, "parse_kml", "KML_PARSE_FAILED"),
        (KmlValidationError, KmlParseError, "parse_kml", "KML_VALIDATION_FAILED"),
        (ProjectionError, ValidationError, "project", "PROJECTION_FAILED"),
        (DegenerateBoundingBoxError, ProjectionError, "project", "DEGENERATE_BBOX"),
        (RasterizeError, PermanentError, "rasterize_segment", "RASTERIZE_FAILED"),
    ]

    @pytest.mark.parametrize(("cls", "parent", "stage", "code"), EXPECTED)
    def test_defaults(
        self,
        cls: type[PipelineError],
        parent: type[PipelineError],
        stage: str,
        code: str,
    ) -> None:
        err = cls("x")
        assert isinstance(err, parent)
        assert isinstance(err, PipelineError)
        assert err.stage == stage
        assert err.code == code
        assert err.retryable is False

    def test_config_validation_error(self) -> None:
        err = ConfigValidationError("SEGMENT_CANVAS_SIZE", 0, "must be between 1 and 8192")
        assert isinstance(err, PipelineError)
        assert err.code == "CONFIG_VALIDATION_FAILED"
        assert "SEGMENT_CANVAS_SIZE=0" in err.message
