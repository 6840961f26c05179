"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    USER_FACING_MESSAGE,
    ScreeningError,
    InvalidInputError,
    IntakeValidationError,
    RenderFailureError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "USER_FACING_MESSAGE",
    "ScreeningError",
    "InvalidInputError",
    "IntakeValidationError",
    "RenderFailureError",
]
