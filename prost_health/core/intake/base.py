"""
Intake Layer - Base Types

Closed vocabularies for every tagged answer on the screening form and the
frozen IntakeRecord that the classifier and the report composer consume.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple


class YesNo(str, Enum):
    YES = "yes"
    NO = "no"


class Ethnicity(str, Enum):
    WHITE           = "white"
    BLACK_AFRICAN   = "black-african"
    BLACK_CARIBBEAN = "black-caribbean"
    ASIAN           = "asian"
    OTHER           = "other"


class FamilyRelation(str, Enum):
    """Relatives with a prostate cancer diagnosis."""
    FATHER      = "father"
    BROTHER     = "brother"
    GRANDFATHER = "grandfather"
    OTHER       = "other"


class Symptom(str, Enum):
    """
    Current symptoms.

    NONE is an explicit "no symptoms" answer and is mutually exclusive with
    every other member.
    """
    URINARY = "urinary"
    BLOOD   = "blood"
    PAIN    = "pain"
    NONE    = "none"


# Report grouping for the "Current Symptoms" table
URINARY_SYMPTOMS = (Symptom.URINARY,)
OTHER_SYMPTOMS = (Symptom.BLOOD, Symptom.PAIN)


class SafetyFlag(str, Enum):
    """MRI contraindication questions, in the order they are asked."""
    PACEMAKER           = "pacemaker"
    ANEURYSM_CLIPS      = "aneurysm-clips"
    IMPLANTS            = "implants"
    EYE_METAL_FRAGMENTS = "eye-metal-fragments"
    KIDNEY_ISSUES       = "kidney-issues"
    CLAUSTROPHOBIA      = "claustrophobia"


def normalise_symptoms(symptoms: Iterable[Symptom]) -> Tuple[Symptom, ...]:
    """
    Enforce the NONE exclusivity rule and drop duplicates.

    Any real symptom wins over NONE, matching the form behaviour where ticking
    a symptom clears the "none of these" box.
    """
    ordered: list = []
    for s in symptoms:
        s = Symptom(s)
        if s not in ordered:
            ordered.append(s)
    real = [s for s in ordered if s is not Symptom.NONE]
    if real:
        return tuple(real)
    return (Symptom.NONE,) if ordered else ()


def calculate_age(date_of_birth: date, on: date) -> int:
    """Whole years between two dates using calendar (not day-count) arithmetic."""
    age = on.year - date_of_birth.year
    if (on.month, on.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def parse_psa(raw: Optional[str]) -> Optional[Decimal]:
    """Parse a PSA reading in ng/mL. Returns None for blank or non-numeric text."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite() or value < 0:
        return None
    return value


def _default_safety() -> Dict[SafetyFlag, YesNo]:
    return {flag: YesNo.NO for flag in SafetyFlag}


@dataclass(frozen=True)
class IntakeRecord:
    """
    One patient's answers, frozen at form submission.

    Optional demographic fields are empty strings when not supplied; they
    are rendered as "Not provided" rather than raising.
    """
    # ── Identity ──────────────────────────────────────────────────────────
    first_name: str = ""
    last_name: str = ""
    date_of_birth: Optional[date] = None
    email: str = ""
    phone: str = ""
    nhs_number: str = ""
    gp_practice: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    postcode: str = ""

    # ── Medical history ───────────────────────────────────────────────────
    previous_psa: YesNo = YesNo.NO
    last_psa_date: Optional[date] = None
    last_psa_result: str = ""              # raw text as entered, e.g. "4.2"
    previous_biopsy: YesNo = YesNo.NO
    previous_mri: YesNo = YesNo.NO
    medications: str = ""

    # ── Risk factors ──────────────────────────────────────────────────────
    family_history: Tuple[FamilyRelation, ...] = ()
    symptoms: Tuple[Symptom, ...] = ()
    ethnicity: Optional[Ethnicity] = None

    # ── MRI safety ────────────────────────────────────────────────────────
    # Read-only view; excluded from the hash
    safety: Mapping[SafetyFlag, YesNo] = field(default_factory=_default_safety, hash=False)

    consent: bool = False

    def __post_init__(self):
        # Coerce loose inputs to the closed vocabularies; frozen, so go via object
        object.__setattr__(self, "previous_psa", YesNo(self.previous_psa))
        object.__setattr__(self, "previous_biopsy", YesNo(self.previous_biopsy))
        object.__setattr__(self, "previous_mri", YesNo(self.previous_mri))
        object.__setattr__(
            self, "family_history",
            tuple(dict.fromkeys(FamilyRelation(r) for r in self.family_history)),
        )
        object.__setattr__(self, "symptoms", normalise_symptoms(self.symptoms))
        if self.ethnicity is not None:
            object.__setattr__(self, "ethnicity", Ethnicity(self.ethnicity))
        safety = _default_safety()
        for flag, answer in (self.safety or {}).items():
            safety[SafetyFlag(flag)] = YesNo(answer)
        object.__setattr__(self, "safety", MappingProxyType(safety))

    # ── Derived views ─────────────────────────────────────────────────────
    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name.strip(), self.last_name.strip()) if p)

    @property
    def psa_value(self) -> Optional[Decimal]:
        """Last PSA result, only when a previous PSA test was reported."""
        if self.previous_psa is not YesNo.YES:
            return None
        return parse_psa(self.last_psa_result)

    @property
    def psa_date(self) -> Optional[date]:
        if self.previous_psa is not YesNo.YES:
            return None
        return self.last_psa_date

    @property
    def real_symptoms(self) -> Tuple[Symptom, ...]:
        return tuple(s for s in self.symptoms if s is not Symptom.NONE)

    @property
    def has_safety_concerns(self) -> bool:
        return any(answer is YesNo.YES for answer in self.safety.values())

    def age_on(self, on: date) -> Optional[int]:
        if self.date_of_birth is None:
            return None
        return calculate_age(self.date_of_birth, on)
