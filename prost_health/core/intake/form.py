"""
Multi-Step Intake Form

The screening form is collected over four steps. Rather than mutating a
shared answers dict, each transition returns a new IntakeForm value:

    form = IntakeForm.start()
    form = form.submit_step(FormStep.PERSONAL_DETAILS, {...})
    form = form.submit_step(FormStep.MEDICAL_HISTORY, {...})
    ...
    record = form.build_record()

Field names accept both the browser form's camelCase names (``dateOfBirth``,
``previousPSA``, ``safetyPacemaker``) and snake_case.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type

from pydantic import (
    BaseModel, ConfigDict, Field, ValidationError, ValidationInfo,
    field_validator, model_validator,
)
from pydantic_core import PydanticCustomError

from prost_health.utils import get_logger, IntakeValidationError
from .base import (
    Ethnicity, FamilyRelation, IntakeRecord, SafetyFlag, Symptom, YesNo,
    calculate_age, normalise_symptoms,
)

logger = get_logger(__name__)

# ── Field rules (mirrors the browser-side checks) ─────────────────────────────
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[+\d\s\-()]+$")
NHS_NUMBER_PATTERN = re.compile(r"^\d{3}-\d{3}-\d{4}$")

MIN_AGE = 18
MAX_AGE = 120

# pydantic error type -> patient-facing message
_ERROR_MESSAGES = {
    "missing": "This field is required",
    "string_too_short": "This field is required",
    "enum": "Please select an option",
    "date_type": "Please enter a valid date",
    "date_parsing": "Please enter a valid date",
    "date_from_datetime_parsing": "Please enter a valid date",
    "date_from_datetime_inexact": "Please enter a valid date",
}


class FormStep(str, Enum):
    PERSONAL_DETAILS = "personal-details"
    MEDICAL_HISTORY  = "medical-history"
    RISK_FACTORS     = "risk-factors"
    SAFETY_CONSENT   = "safety-consent"

    @property
    def number(self) -> int:
        return _STEP_ORDER.index(self) + 1


_STEP_ORDER: List[FormStep] = list(FormStep)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ── Step models ──────────────────────────────────────────────────────────────

class _StepModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, frozen=True)


class PersonalDetails(_StepModel):
    """Step 1."""
    first_name: str = Field(alias="firstName", min_length=1)
    last_name: str = Field(alias="lastName", min_length=1)
    date_of_birth: Optional[date] = Field(default=None, alias="dateOfBirth", validate_default=True)
    email: str = Field(alias="email")
    phone: str = Field(default="", alias="phone")
    nhs_number: str = Field(default="", alias="nhsNumber")
    gp_practice: str = Field(default="", alias="gpPractice")
    address_line1: str = Field(default="", alias="addressLine1")
    address_line2: str = Field(default="", alias="addressLine2")
    city: str = Field(default="", alias="city")
    postcode: str = Field(default="", alias="postcode")

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def _blank_date(cls, value):
        return _blank_to_none(value)

    @field_validator("date_of_birth")
    @classmethod
    def _age_in_range(cls, value: Optional[date], info: ValidationInfo) -> date:
        if value is None:
            raise PydanticCustomError("required", "This field is required")
        today = (info.context or {}).get("today") or date.today()
        age = calculate_age(value, today)
        if age < MIN_AGE or age > MAX_AGE:
            raise PydanticCustomError(
                "age_range",
                "Please enter a valid date of birth (age {min_age}-{max_age})",
                {"min_age": MIN_AGE, "max_age": MAX_AGE},
            )
        return value

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("required", "This field is required")
        if not EMAIL_PATTERN.match(value):
            raise PydanticCustomError("email", "Please enter a valid email address")
        return value

    @field_validator("phone")
    @classmethod
    def _phone(cls, value: str) -> str:
        if value and not PHONE_PATTERN.match(value):
            raise PydanticCustomError("phone", "Please enter a valid phone number")
        return value

    @field_validator("nhs_number")
    @classmethod
    def _nhs_number(cls, value: str) -> str:
        if value and not NHS_NUMBER_PATTERN.match(value):
            raise PydanticCustomError("nhs_number", "Please enter a valid NHS number (XXX-XXX-XXXX)")
        return value


class MedicalHistory(_StepModel):
    """Step 2. PSA details are only kept when a previous PSA test is reported."""
    previous_psa: YesNo = Field(alias="previousPSA")
    last_psa_date: Optional[date] = Field(default=None, alias="lastPSADate")
    last_psa_result: str = Field(default="", alias="lastPSAResult")
    previous_biopsy: YesNo = Field(alias="previousBiopsy")
    previous_mri: YesNo = Field(alias="previousMRI")
    medications: str = Field(default="", alias="medications")

    @field_validator("last_psa_date", mode="before")
    @classmethod
    def _blank_date(cls, value):
        return _blank_to_none(value)

    @field_validator("last_psa_result", mode="before")
    @classmethod
    def _result_as_text(cls, value):
        # Numbers from JSON clients are kept as entered; parsing happens at scoring time
        if value is None:
            return ""
        return str(value)

    @model_validator(mode="before")
    @classmethod
    def _drop_psa_details(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        answer = data.get("previousPSA", data.get("previous_psa"))
        if str(getattr(answer, "value", answer)).strip().lower() != YesNo.NO.value:
            return data
        data = dict(data)
        for key in ("lastPSADate", "last_psa_date", "lastPSAResult", "last_psa_result"):
            data.pop(key, None)
        return data


class RiskFactors(_StepModel):
    """Step 3."""
    family_history: List[FamilyRelation] = Field(default_factory=list, alias="familyHistory")
    symptoms: List[Symptom] = Field(default_factory=list, alias="symptoms")
    ethnicity: Optional[Ethnicity] = Field(default=None, alias="ethnicity")

    @field_validator("family_history", "symptoms", mode="before")
    @classmethod
    def _single_tag(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        return value

    @field_validator("ethnicity", mode="before")
    @classmethod
    def _blank_ethnicity(cls, value):
        return _blank_to_none(value)

    @field_validator("symptoms")
    @classmethod
    def _none_is_exclusive(cls, value: List[Symptom]) -> List[Symptom]:
        return list(normalise_symptoms(value))


class SafetyAndConsent(_StepModel):
    """Step 4: MRI contraindications plus data-processing consent."""
    pacemaker: YesNo = Field(default=YesNo.NO, alias="safetyPacemaker")
    aneurysm_clips: YesNo = Field(default=YesNo.NO, alias="safetyClips")
    implants: YesNo = Field(default=YesNo.NO, alias="safetyImplants")
    eye_metal_fragments: YesNo = Field(default=YesNo.NO, alias="safetyMetal")
    kidney_issues: YesNo = Field(default=YesNo.NO, alias="safetyKidney")
    claustrophobia: YesNo = Field(default=YesNo.NO, alias="safetyClaustrophobia")
    consent: bool = Field(default=False, alias="consent")

    @field_validator("consent")
    @classmethod
    def _consent_given(cls, value: bool) -> bool:
        if not value:
            raise PydanticCustomError(
                "consent", "Please consent to the processing of your data to continue."
            )
        return value

    def flags(self) -> Dict[SafetyFlag, YesNo]:
        return {
            SafetyFlag.PACEMAKER: self.pacemaker,
            SafetyFlag.ANEURYSM_CLIPS: self.aneurysm_clips,
            SafetyFlag.IMPLANTS: self.implants,
            SafetyFlag.EYE_METAL_FRAGMENTS: self.eye_metal_fragments,
            SafetyFlag.KIDNEY_ISSUES: self.kidney_issues,
            SafetyFlag.CLAUSTROPHOBIA: self.claustrophobia,
        }


STEP_MODELS: Dict[FormStep, Type[_StepModel]] = {
    FormStep.PERSONAL_DETAILS: PersonalDetails,
    FormStep.MEDICAL_HISTORY: MedicalHistory,
    FormStep.RISK_FACTORS: RiskFactors,
    FormStep.SAFETY_CONSENT: SafetyAndConsent,
}


def _field_errors(exc: ValidationError) -> Dict[str, str]:
    """Flatten a pydantic ValidationError into {field: message}."""
    errors: Dict[str, str] = {}
    for err in exc.errors():
        name = str(err["loc"][0]) if err.get("loc") else "__all__"
        if name in errors:
            continue
        errors[name] = _ERROR_MESSAGES.get(err["type"], err["msg"])
    return errors


def validate_step(step: FormStep, data: Mapping[str, Any], today: Optional[date] = None) -> _StepModel:
    """
    Validate one step's answers.

    Raises:
        IntakeValidationError: with a {field: message} map
    """
    model = STEP_MODELS[step]
    try:
        return model.model_validate(dict(data), context={"today": today})
    except ValidationError as exc:
        errors = _field_errors(exc)
        logger.debug(f"IntakeForm [{step.value}]: {len(errors)} invalid field(s): {sorted(errors)}")
        raise IntakeValidationError(
            f"Step '{step.value}' failed validation",
            step=step.value,
            errors=errors,
        ) from exc


# ── Form state value ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class IntakeForm:
    """
    Immutable snapshot of a partially completed form.

    `answers` holds the validated model for every step submitted so far.
    `current_step` is where the user is; going back keeps later answers.
    """
    current_step: FormStep = FormStep.PERSONAL_DETAILS
    answers: Mapping[FormStep, _StepModel] = field(default_factory=dict)
    today: Optional[date] = None

    @classmethod
    def start(cls, today: Optional[date] = None) -> "IntakeForm":
        return cls(today=today)

    @property
    def total_steps(self) -> int:
        return len(_STEP_ORDER)

    @property
    def progress(self) -> float:
        """Fraction shown on the progress bar (current step / total)."""
        return self.current_step.number / self.total_steps

    @property
    def is_complete(self) -> bool:
        return all(step in self.answers for step in _STEP_ORDER)

    def submit_step(self, step: FormStep, data: Mapping[str, Any]) -> "IntakeForm":
        """Validate `data` for `step` and return the form advanced past it."""
        step = FormStep(step)
        model = validate_step(step, data, today=self.today)
        answers = {**self.answers, step: model}
        index = _STEP_ORDER.index(step)
        next_step = _STEP_ORDER[min(index + 1, len(_STEP_ORDER) - 1)]
        return replace(self, answers=answers, current_step=next_step)

    def back(self) -> "IntakeForm":
        index = _STEP_ORDER.index(self.current_step)
        return replace(self, current_step=_STEP_ORDER[max(index - 1, 0)])

    def build_record(self) -> IntakeRecord:
        """
        Freeze the answers into an IntakeRecord.

        Raises:
            IntakeValidationError: if any step has not been submitted
        """
        missing = [s for s in _STEP_ORDER if s not in self.answers]
        if missing:
            raise IntakeValidationError(
                "Form submitted before all steps were completed",
                step=missing[0].value,
                errors={s.value: "This step has not been completed" for s in missing},
            )

        personal: PersonalDetails = self.answers[FormStep.PERSONAL_DETAILS]
        history: MedicalHistory = self.answers[FormStep.MEDICAL_HISTORY]
        factors: RiskFactors = self.answers[FormStep.RISK_FACTORS]
        safety: SafetyAndConsent = self.answers[FormStep.SAFETY_CONSENT]

        return IntakeRecord(
            first_name=personal.first_name,
            last_name=personal.last_name,
            date_of_birth=personal.date_of_birth,
            email=personal.email,
            phone=personal.phone,
            nhs_number=personal.nhs_number,
            gp_practice=personal.gp_practice,
            address_line1=personal.address_line1,
            address_line2=personal.address_line2,
            city=personal.city,
            postcode=personal.postcode,
            previous_psa=history.previous_psa,
            last_psa_date=history.last_psa_date,
            last_psa_result=history.last_psa_result,
            previous_biopsy=history.previous_biopsy,
            previous_mri=history.previous_mri,
            medications=history.medications,
            family_history=tuple(factors.family_history),
            symptoms=tuple(factors.symptoms),
            ethnicity=factors.ethnicity,
            safety=safety.flags(),
            consent=safety.consent,
        )

    @classmethod
    def from_answers(cls, data: Mapping[str, Any], today: Optional[date] = None) -> IntakeRecord:
        """
        Validate a flat answers mapping (all steps at once) into a record.

        Errors from every step are merged so a single-page client sees all
        of them in one response.
        """
        form = cls.start(today=today)
        errors: Dict[str, str] = {}
        first_failed: Optional[FormStep] = None
        for step in _STEP_ORDER:
            try:
                form = form.submit_step(step, data)
            except IntakeValidationError as exc:
                errors.update(exc.errors)
                first_failed = first_failed or step
        if errors:
            raise IntakeValidationError(
                "Intake answers failed validation",
                step=first_failed.value,
                errors=errors,
            )
        return form.build_record()
