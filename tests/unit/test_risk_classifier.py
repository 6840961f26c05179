"""
Unit Tests for Risk Classification

Tests for the scoring rules, tier thresholds and the classifier itself.
"""
from dataclasses import replace
from datetime import date

import pytest

from prost_health.core.intake import (
    Ethnicity, FamilyRelation, IntakeRecord, Symptom, YesNo,
)
from prost_health.core.risk import (
    RiskClassifier, RiskTier, THRESHOLD_HIGH, THRESHOLD_MEDIUM, tier_for_score,
)
from prost_health.core.risk.rules import rule_age, rule_psa, rule_symptoms
from prost_health.utils import InvalidInputError

TODAY = date(2025, 6, 1)


def _record(**overrides) -> IntakeRecord:
    """A record with every factor zeroed except those overridden."""
    fields = dict(
        first_name="Test",
        last_name="Patient",
        date_of_birth=date(1990, 1, 1),    # 35 on TODAY
        previous_psa=YesNo.YES,
        last_psa_result="1.0",
    )
    fields.update(overrides)
    return IntakeRecord(**fields)


def _score(record: IntakeRecord) -> int:
    return RiskClassifier().classify(record, today=TODAY).score


class TestAgeRule:
    """Tests for the age bands."""

    @pytest.mark.parametrize("dob, points", [
        (date(1981, 1, 1), 0),    # 44
        (date(1980, 1, 1), 1),    # 45
        (date(1976, 1, 1), 1),    # 49
        (date(1975, 1, 1), 2),    # 50
        (date(1956, 1, 1), 2),    # 69
        (date(1955, 1, 1), 3),    # 70
        (date(1935, 1, 1), 3),    # 90
    ])
    def test_age_bands(self, dob, points):
        assert _score(_record(date_of_birth=dob)) == points

    def test_age_is_monotonic(self):
        scores = [_score(_record(date_of_birth=date(2025 - age, 1, 1))) for age in range(30, 95)]
        assert scores == sorted(scores)

    def test_birthday_not_yet_reached(self):
        # Turns 50 on 2 June 2025, so still 49 on 1 June
        record = _record(date_of_birth=date(1975, 6, 2))
        assessment = RiskClassifier().classify(record, today=TODAY)
        assert assessment.age == 49
        assert assessment.score == 1

    def test_rule_ids(self):
        assert rule_age(_record(), 45).rule_id == "AGE-045"
        assert rule_age(_record(), 50).rule_id == "AGE-050"
        assert rule_age(_record(), 70).rule_id == "AGE-070"
        assert rule_age(_record(), 44) is None


class TestFamilyHistoryRule:

    def test_empty_contributes_nothing(self):
        assert _score(_record(family_history=())) == 0

    def test_single_non_father_relation(self):
        assert _score(_record(family_history=(FamilyRelation.BROTHER,))) == 2

    def test_father(self):
        assert _score(_record(family_history=(FamilyRelation.FATHER,))) == 3

    def test_multiple_relations(self):
        relations = (FamilyRelation.BROTHER, FamilyRelation.GRANDFATHER)
        assert _score(_record(family_history=relations)) == 3


class TestEthnicityRule:

    @pytest.mark.parametrize("ethnicity, points", [
        (Ethnicity.BLACK_AFRICAN, 2),
        (Ethnicity.BLACK_CARIBBEAN, 2),
        (Ethnicity.WHITE, 0),
        (Ethnicity.ASIAN, 0),
        (None, 0),
    ])
    def test_ethnicity(self, ethnicity, points):
        assert _score(_record(ethnicity=ethnicity)) == points


class TestPSARule:
    """PSA bands are cumulative: >3.0, >=4, >=10."""

    @pytest.mark.parametrize("result, points", [
        ("2.9", 0),
        ("3.0", 0),
        ("3.1", 2),
        ("4", 4),
        ("9.9", 4),
        ("10", 6),
        ("12", 6),
    ])
    def test_psa_bands(self, result, points):
        assert _score(_record(last_psa_result=result)) == points

    def test_no_previous_psa_scores_unknown_status(self):
        factor = rule_psa(_record(previous_psa=YesNo.NO, last_psa_result="50"), 35)
        assert factor.points == 1
        assert factor.description == "Unknown PSA status"

    @pytest.mark.parametrize("result", ["", "abc", "NaN", "Infinity", "-4"])
    def test_unreadable_result_is_treated_as_absent(self, result):
        assert _score(_record(last_psa_result=result)) == 0

    def test_factor_text(self):
        factor = rule_psa(_record(last_psa_result="12.0"), 35)
        assert factor.description == "Elevated PSA level: 12 ng/mL"


class TestSymptomsRule:

    def test_none_equals_empty(self):
        assert _score(_record(symptoms=(Symptom.NONE,))) == _score(_record(symptoms=())) == 0

    def test_urinary_only(self):
        factor = rule_symptoms(_record(symptoms=(Symptom.URINARY,)), 35)
        assert factor.points == 1
        assert factor.description == "Present urinary symptoms"

    @pytest.mark.parametrize("symptoms", [
        (Symptom.BLOOD,),
        (Symptom.PAIN,),
        (Symptom.URINARY, Symptom.PAIN),
    ])
    def test_red_flag_symptoms(self, symptoms):
        assert _score(_record(symptoms=symptoms)) == 2


class TestTiers:

    def test_thresholds(self):
        assert THRESHOLD_MEDIUM == 3
        assert THRESHOLD_HIGH == 6

    @pytest.mark.parametrize("score, tier", [
        (0, RiskTier.LOW),
        (2, RiskTier.LOW),
        (3, RiskTier.MEDIUM),
        (5, RiskTier.MEDIUM),
        (6, RiskTier.HIGH),
        (20, RiskTier.HIGH),
    ])
    def test_tier_for_score(self, score, tier):
        assert tier_for_score(score) is tier

    def test_tier_monotonic_in_score(self):
        order = [RiskTier.LOW, RiskTier.MEDIUM, RiskTier.HIGH]
        ranks = [order.index(tier_for_score(s)) for s in range(0, 25)]
        assert ranks == sorted(ranks)

    def test_labels(self):
        assert RiskTier.HIGH.label == "High Risk"
        assert RiskTier.LOW.label == "Low Risk"


class TestRiskClassifier:

    def test_low_risk_scenario(self, low_risk_record, today):
        assessment = RiskClassifier().classify(low_risk_record, today=today)

        assert assessment.age == 45
        assert assessment.score == 2
        assert assessment.tier is RiskTier.LOW
        assert assessment.factors == [
            "Age 45 (45 or over) may increase risk",
            "Unknown PSA status",
        ]

    def test_high_risk_scenario(self, high_risk_record, today):
        assessment = RiskClassifier().classify(high_risk_record, today=today)

        # age 65 (+2), father (+3), Black African (+2), PSA 12 (+6), blood (+2)
        assert assessment.score == 15
        assert assessment.tier is RiskTier.HIGH
        assert [c.rule_id for c in assessment.contributions] == [
            "AGE-050", "FAM-002", "ETH-001", "PSA-003", "SYM-002",
        ]

    def test_missing_date_of_birth_raises(self, low_risk_record):
        record = replace(low_risk_record, date_of_birth=None)
        with pytest.raises(InvalidInputError) as exc_info:
            RiskClassifier().classify(record, today=TODAY)
        assert exc_info.value.code == "INVALID_INPUT"
        assert exc_info.value.field == "dateOfBirth"

    def test_deterministic(self, high_risk_record, today):
        classifier = RiskClassifier()
        first = classifier.classify(high_risk_record, today=today)
        second = classifier.classify(high_risk_record, today=today)
        assert first.to_dict() == second.to_dict()

    def test_custom_rules(self, low_risk_record, today):
        classifier = RiskClassifier(rules=[rule_age])
        assert classifier.classify(low_risk_record, today=today).score == 1

    def test_summarise(self, high_risk_record, today):
        summary = RiskClassifier.summarise(RiskClassifier().classify(high_risk_record, today=today))

        assert summary["tier"] == "HIGH"
        assert summary["label"] == "High Risk"
        assert summary["next_steps"]
        assert "NICE NG131" in summary["explanation"]
        assert len(summary["contributions"]) == len(summary["factors"])

    def test_tiers(self):
        assert RiskClassifier.tiers() == [RiskTier.LOW, RiskTier.MEDIUM, RiskTier.HIGH]
