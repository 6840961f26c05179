"""
API Models Package
"""
from .screening import (
    ScreeningAnswers,
    RiskContribution,
    RiskAssessmentResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "ScreeningAnswers",
    "RiskContribution",
    "RiskAssessmentResponse",
    "ErrorResponse",
    "HealthResponse",
]
