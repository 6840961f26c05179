"""
Intake Layer

Typed patient answers and the multi-step form that produces them.

Usage:
    from prost_health.core.intake import IntakeForm

    record = IntakeForm.from_answers(form_json)
"""
from .base import (
    IntakeRecord,
    YesNo,
    Ethnicity,
    FamilyRelation,
    Symptom,
    SafetyFlag,
    URINARY_SYMPTOMS,
    OTHER_SYMPTOMS,
    calculate_age,
    normalise_symptoms,
    parse_psa,
)
from .form import IntakeForm, FormStep, validate_step

__all__ = [
    "IntakeRecord",
    "YesNo",
    "Ethnicity",
    "FamilyRelation",
    "Symptom",
    "SafetyFlag",
    "URINARY_SYMPTOMS",
    "OTHER_SYMPTOMS",
    "calculate_age",
    "normalise_symptoms",
    "parse_psa",
    "IntakeForm",
    "FormStep",
    "validate_step",
]
