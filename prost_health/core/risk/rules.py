"""
Prostate Risk Scoring Rules

Additive point rules informed by (not a substitute for) NICE NG131 and the
published prostate cancer risk factors: age, family history, Black
ethnicity, raised PSA and red-flag symptoms.

Every rule has the signature (IntakeRecord, age) -> Optional[RiskFactor]
and does not look at any other rule's result. RULES fixes the evaluation
order, which is also the factor order printed on the report.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Callable, List, Optional

from prost_health.core.intake import Ethnicity, FamilyRelation, IntakeRecord, Symptom, YesNo
from .base import RiskFactor, RiskTier

# ── Age bands ────────────────────────────────────────────────────────────────
AGE_EARLY          = 45    # 45-49
AGE_STANDARD       = 50    # 50-69
AGE_ELDERLY        = 70    # 70+
POINTS_AGE_EARLY   = 1
POINTS_AGE_50      = 2
POINTS_AGE_70      = 3     # the 50+ points plus one

# ── Family history ───────────────────────────────────────────────────────────
POINTS_FAMILY          = 2
POINTS_FAMILY_STRONG   = 3     # father affected, or more than one relative

# ── Ethnicity ────────────────────────────────────────────────────────────────
HIGH_RISK_ETHNICITIES  = frozenset({Ethnicity.BLACK_AFRICAN, Ethnicity.BLACK_CARIBBEAN})
POINTS_ETHNICITY       = 2

# ── PSA (ng/mL); bands are cumulative ────────────────────────────────────────
PSA_ELEVATED           = Decimal("3.0")    # strictly greater than
PSA_RAISED             = Decimal("4")      # greater or equal
PSA_HIGH               = Decimal("10")     # greater or equal
POINTS_PER_PSA_BAND    = 2
POINTS_PSA_UNKNOWN     = 1

# ── Symptoms ─────────────────────────────────────────────────────────────────
RED_FLAG_SYMPTOMS      = frozenset({Symptom.BLOOD, Symptom.PAIN})
POINTS_SYMPTOMS        = 1
POINTS_RED_FLAG        = 2

# ── Tiers ────────────────────────────────────────────────────────────────────
THRESHOLD_MEDIUM       = 3
THRESHOLD_HIGH         = 6


def tier_for_score(score: int) -> RiskTier:
    if score >= THRESHOLD_HIGH:
        return RiskTier.HIGH
    if score >= THRESHOLD_MEDIUM:
        return RiskTier.MEDIUM
    return RiskTier.LOW


def _fmt_psa(value: Decimal) -> str:
    # "12.0" → "12", "4.20" → "4.2"
    return format(value.normalize(), "f")


# ── Rule 1: Age ──────────────────────────────────────────────────────────────

def rule_age(record: IntakeRecord, age: int) -> Optional[RiskFactor]:
    if age >= AGE_ELDERLY:
        return RiskFactor("AGE-070", POINTS_AGE_70, f"Age {age} (70 or over) increases risk")
    if age >= AGE_STANDARD:
        return RiskFactor("AGE-050", POINTS_AGE_50, f"Age {age} (50 or over) increases risk")
    if age >= AGE_EARLY:
        return RiskFactor("AGE-045", POINTS_AGE_EARLY, f"Age {age} (45 or over) may increase risk")
    return None


# ── Rule 2: Family history ───────────────────────────────────────────────────

def rule_family_history(record: IntakeRecord, age: int) -> Optional[RiskFactor]:
    relations = record.family_history
    if not relations:
        return None
    if FamilyRelation.FATHER in relations or len(relations) > 1:
        return RiskFactor(
            "FAM-002", POINTS_FAMILY_STRONG,
            "Family history of prostate cancer (father or multiple relatives)",
        )
    return RiskFactor("FAM-001", POINTS_FAMILY, "Family history of prostate cancer")


# ── Rule 3: Ethnicity ────────────────────────────────────────────────────────

def rule_ethnicity(record: IntakeRecord, age: int) -> Optional[RiskFactor]:
    if record.ethnicity in HIGH_RISK_ETHNICITIES:
        return RiskFactor("ETH-001", POINTS_ETHNICITY, "Higher risk associated with Black ethnicity")
    return None


# ── Rule 4: PSA history ──────────────────────────────────────────────────────

def rule_psa(record: IntakeRecord, age: int) -> Optional[RiskFactor]:
    """
    Tiered PSA severity.

    A reported test with an unreadable result scores nothing; no test at all
    scores the "unknown PSA status" point.
    """
    if record.previous_psa is YesNo.NO:
        return RiskFactor("PSA-000", POINTS_PSA_UNKNOWN, "Unknown PSA status")

    psa = record.psa_value
    if psa is None or psa <= PSA_ELEVATED:
        return None

    bands = 1
    if psa >= PSA_RAISED:
        bands += 1
    if psa >= PSA_HIGH:
        bands += 1
    return RiskFactor(
        f"PSA-{bands:03d}", bands * POINTS_PER_PSA_BAND,
        f"Elevated PSA level: {_fmt_psa(psa)} ng/mL",
    )


# ── Rule 5: Symptoms ─────────────────────────────────────────────────────────

def rule_symptoms(record: IntakeRecord, age: int) -> Optional[RiskFactor]:
    symptoms = record.real_symptoms
    if not symptoms:
        return None
    if RED_FLAG_SYMPTOMS.intersection(symptoms):
        return RiskFactor("SYM-002", POINTS_RED_FLAG, "Red-flag symptoms reported (blood or pain)")
    return RiskFactor("SYM-001", POINTS_SYMPTOMS, "Present urinary symptoms")


Rule = Callable[[IntakeRecord, int], Optional[RiskFactor]]

RULES: List[Rule] = [
    rule_age,
    rule_family_history,
    rule_ethnicity,
    rule_psa,
    rule_symptoms,
]
