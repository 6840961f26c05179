"""
Risk Classifier

Runs every scoring rule against an IntakeRecord and maps the total to a
RiskTier.

Usage:
    from prost_health.core.risk import RiskClassifier

    classifier = RiskClassifier()
    assessment = classifier.classify(record, today=date(2025, 1, 31))
    print(assessment.tier, assessment.score, assessment.factors)

Age is computed against `today`, so the result is only reproducible when a
reference date is passed in.
"""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from prost_health.core.intake import IntakeRecord
from prost_health.utils import get_logger, InvalidInputError
from .base import RiskAssessment, RiskFactor, RiskTier
from .rules import RULES, Rule, tier_for_score

logger = get_logger(__name__)


class RiskClassifier:
    """
    Maps an IntakeRecord to a RiskAssessment.

    Stateless; safe to call from concurrent requests.
    """

    def __init__(self, rules: Optional[List[Rule]] = None):
        self._rules = list(rules) if rules is not None else list(RULES)

    def classify(self, record: IntakeRecord, today: Optional[date] = None) -> RiskAssessment:
        """
        Score a record.

        Args:
            record: Validated intake answers
            today:  Reference date for the age calculation (defaults to today)

        Returns:
            RiskAssessment with tier, score and ordered contributions

        Raises:
            InvalidInputError: if the date of birth is missing
        """
        if record.date_of_birth is None:
            raise InvalidInputError(
                "Date of birth is required to calculate risk",
                field="dateOfBirth",
            )

        today = today or date.today()
        age = record.age_on(today)

        contributions: List[RiskFactor] = []
        for rule in self._rules:
            factor = rule(record, age)
            if factor is not None:
                contributions.append(factor)
                logger.debug(f"RiskClassifier: {factor.rule_id} +{factor.points}")

        score = sum(c.points for c in contributions)
        tier = tier_for_score(score)

        logger.info(
            f"RiskClassifier: score={score} tier={tier.value} "
            f"({len(contributions)} factor(s): "
            + ", ".join(c.rule_id for c in contributions) + ")"
        )
        return RiskAssessment(tier=tier, score=score, age=age, contributions=contributions)

    @staticmethod
    def summarise(assessment: RiskAssessment) -> Dict:
        """
        Build a compact summary dict suitable for JSON API responses.

        Example output:
        {
            "tier": "MEDIUM",
            "label": "Medium Risk",
            "score": 4,
            "factors": ["Age 52 (50 or over) increases risk", "Family history of prostate cancer"],
            ...
        }
        """
        return assessment.to_dict()

    @staticmethod
    def tiers() -> List[RiskTier]:
        return list(RiskTier)
