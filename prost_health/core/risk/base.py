"""
Risk Layer - Base Types

Defines the data contracts produced by the classifier and consumed by the
report composer and the API.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class RiskTier(str, Enum):
    """
    Screening risk tier.

    LOW    - awareness and routine check-ups
    MEDIUM - discuss screening with a GP
    HIGH   - MRI-first assessment recommended
    """
    LOW    = "LOW"
    MEDIUM = "MEDIUM"
    HIGH   = "HIGH"

    @property
    def label(self) -> str:
        return f"{self.value.title()} Risk"


@dataclass(frozen=True)
class RiskFactor:
    """One rule's contribution to the score."""
    rule_id: str          # e.g. "AGE-050"
    points: int
    description: str      # short text shown in the report factor list


@dataclass(frozen=True)
class TierGuidance:
    explanation: str
    next_steps: List[str]


TIER_GUIDANCE = {
    RiskTier.HIGH: TierGuidance(
        explanation=(
            "Based on your responses, you have several risk factors that warrant "
            "medical attention. According to NICE NG131 guidelines, you should discuss "
            "screening options with your healthcare provider."
        ),
        next_steps=[
            "Schedule an appointment with your GP to discuss prostate screening options",
            "Consider MRI-first assessment to avoid unnecessary biopsies",
            "Bring this form to your appointment",
        ],
    ),
    RiskTier.MEDIUM: TierGuidance(
        explanation=(
            "Based on your responses, you have some risk factors worth monitoring. "
            "While your overall risk is not high, NICE NG131 guidelines suggest "
            "discussing screening with your healthcare provider, especially if you "
            "are over 50."
        ),
        next_steps=[
            "Discuss prostate health screening with your GP",
            "Consider PSA testing as initial screening",
            "Bring this form to your appointment",
        ],
    ),
    RiskTier.LOW: TierGuidance(
        explanation=(
            "Based on your responses, your risk factors for prostate cancer appear to "
            "be low. However, regular health check-ups are important as risk can "
            "change over time."
        ),
        next_steps=[
            "Maintain regular health check-ups",
            "Be aware of any changes in urinary habits",
            "Reassess risk if family history changes",
        ],
    ),
}


@dataclass
class RiskAssessment:
    """
    Classifier output for one intake record.

    `factors` keeps rule order, which is also the order shown in the report.
    """
    tier: RiskTier
    score: int
    age: Optional[int] = None
    contributions: List[RiskFactor] = field(default_factory=list)

    @property
    def factors(self) -> List[str]:
        return [c.description for c in self.contributions]

    @property
    def guidance(self) -> TierGuidance:
        return TIER_GUIDANCE[self.tier]

    def to_dict(self) -> dict:
        return {
            "tier": self.tier.value,
            "label": self.tier.label,
            "score": self.score,
            "age": self.age,
            "factors": self.factors,
            "contributions": [
                {"rule_id": c.rule_id, "points": c.points, "description": c.description}
                for c in self.contributions
            ],
            "explanation": self.guidance.explanation,
            "next_steps": list(self.guidance.next_steps),
        }
