"""
Custom Exception Hierarchy

Provides specific exception types for the screening pipeline with
structured error information. The `message` of every exception is meant for
logs; callers facing an end user show USER_FACING_MESSAGE instead.
"""
from typing import Optional, Dict, Any


USER_FACING_MESSAGE = (
    "We could not prepare your screening summary. "
    "Please try again or contact support."
)


class ScreeningError(Exception):
    """Base exception for all screening pipeline errors."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }

    def to_public_dict(self) -> Dict[str, Any]:
        """Same shape as to_dict() but without internal error text."""
        return {
            "error": self.code,
            "message": USER_FACING_MESSAGE,
            "retryable": self.retryable,
        }


class InvalidInputError(ScreeningError):
    """A field required for classification is missing or unparseable."""

    def __init__(
        self,
        message: str,
        field: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="INVALID_INPUT",
            details={"field": field, **(details or {})}
        )
        self.field = field


class IntakeValidationError(ScreeningError):
    """One or more intake form fields failed validation."""

    def __init__(
        self,
        message: str,
        step: str = "unknown",
        errors: Optional[Dict[str, str]] = None
    ):
        super().__init__(
            message=message,
            code="INTAKE_VALIDATION",
            details={"step": step, "errors": dict(errors or {})}
        )
        self.step = step
        self.errors = dict(errors or {})

    def to_public_dict(self) -> Dict[str, Any]:
        # Field messages are written for the patient, so they are safe to show
        return {
            "error": self.code,
            "message": "Please correct the highlighted fields.",
            "errors": self.errors,
        }


class RenderFailureError(ScreeningError):
    """The document renderer could not produce bytes."""

    retryable = True

    def __init__(
        self,
        message: str,
        renderer: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="RENDER_FAILURE",
            details={"renderer": renderer, **(details or {})}
        )
        self.renderer = renderer
