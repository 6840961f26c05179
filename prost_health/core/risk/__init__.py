"""
Risk Classification Layer

Turns intake answers into a LOW / MEDIUM / HIGH screening tier.

Usage:
    from prost_health.core.risk import RiskClassifier, RiskTier

    assessment = RiskClassifier().classify(record)
"""
from .classifier import RiskClassifier
from .base import RiskAssessment, RiskFactor, RiskTier, TierGuidance, TIER_GUIDANCE
from .rules import tier_for_score, THRESHOLD_MEDIUM, THRESHOLD_HIGH

__all__ = [
    "RiskClassifier",
    "RiskAssessment",
    "RiskFactor",
    "RiskTier",
    "TierGuidance",
    "TIER_GUIDANCE",
    "tier_for_score",
    "THRESHOLD_MEDIUM",
    "THRESHOLD_HIGH",
]
