"""
Unit Tests for logging and the exception hierarchy.
"""
import logging

import pytest

from prost_health.utils import (
    USER_FACING_MESSAGE,
    IntakeValidationError,
    InvalidInputError,
    RenderFailureError,
    ScreeningError,
)
from prost_health.utils.logging import StructuredFormatter


def _record(msg="Screening request generated", **extra) -> logging.LogRecord:
    record = logging.LogRecord("prost_health.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:

    def test_plain_line(self):
        line = StructuredFormatter(use_color=False).format(_record())

        assert "INFO" in line
        assert "[prost_health.test]" in line
        assert line.endswith("Screening request generated")
        assert "\033[" not in line

    def test_reference_id_is_included(self):
        line = StructuredFormatter(use_color=False).format(_record(reference_id="PH-20250601-ABC123"))
        assert "[ref=PH-20250601-ABC123]" in line

    def test_colour(self):
        line = StructuredFormatter(use_color=True).format(_record())
        assert line.startswith(StructuredFormatter.COLORS["INFO"])
        assert line.endswith(StructuredFormatter.COLORS["RESET"])


class TestExceptions:

    def test_hierarchy(self):
        for exc in (InvalidInputError("x"), IntakeValidationError("x"), RenderFailureError("x")):
            assert isinstance(exc, ScreeningError)

    def test_to_dict_keeps_internal_detail(self):
        error = RenderFailureError("canvas exploded", renderer="reportlab")
        assert error.to_dict() == {
            "error": "RENDER_FAILURE",
            "message": "canvas exploded",
            "details": {"renderer": "reportlab"},
        }

    def test_public_dict_hides_internal_detail(self):
        error = InvalidInputError("dob missing in record 42", field="dateOfBirth")
        assert error.to_public_dict() == {
            "error": "INVALID_INPUT",
            "message": USER_FACING_MESSAGE,
            "retryable": False,
        }

    def test_render_failure_is_retryable(self):
        assert RenderFailureError.retryable is True
        assert InvalidInputError.retryable is False

    def test_intake_validation_errors(self):
        error = IntakeValidationError("bad", step="personal-details", errors={"email": "Invalid"})
        assert error.details == {"step": "personal-details", "errors": {"email": "Invalid"}}
        assert error.to_public_dict()["errors"] == {"email": "Invalid"}

    def test_raise_and_catch_as_base(self):
        with pytest.raises(ScreeningError) as exc_info:
            raise InvalidInputError("missing", field="dateOfBirth")
        assert exc_info.value.code == "INVALID_INPUT"
