"""
API request/response models.

The request body mirrors the browser form field names. Fields are typed
loosely here; the intake form does the real validation so that every
problem comes back with a patient-facing message.
"""
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ScreeningAnswers(BaseModel):
    """Flat answers from all four form steps."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Personal details
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    date_of_birth: Optional[str] = Field(None, alias="dateOfBirth", description="YYYY-MM-DD")
    email: Optional[str] = None
    phone: Optional[str] = None
    nhs_number: Optional[str] = Field(None, alias="nhsNumber", description="XXX-XXX-XXXX")
    gp_practice: Optional[str] = Field(None, alias="gpPractice")
    address_line1: Optional[str] = Field(None, alias="addressLine1")
    address_line2: Optional[str] = Field(None, alias="addressLine2")
    city: Optional[str] = None
    postcode: Optional[str] = None

    # Medical history
    previous_psa: Optional[str] = Field(None, alias="previousPSA", description="yes | no")
    last_psa_date: Optional[str] = Field(None, alias="lastPSADate")
    last_psa_result: Optional[Union[str, float]] = Field(None, alias="lastPSAResult", description="ng/mL")
    previous_biopsy: Optional[str] = Field(None, alias="previousBiopsy")
    previous_mri: Optional[str] = Field(None, alias="previousMRI")
    medications: Optional[str] = None

    # Risk factors
    family_history: Optional[List[str]] = Field(None, alias="familyHistory")
    symptoms: Optional[List[str]] = None
    ethnicity: Optional[str] = None

    # MRI safety and consent
    safety_pacemaker: Optional[str] = Field(None, alias="safetyPacemaker")
    safety_clips: Optional[str] = Field(None, alias="safetyClips")
    safety_implants: Optional[str] = Field(None, alias="safetyImplants")
    safety_metal: Optional[str] = Field(None, alias="safetyMetal")
    safety_kidney: Optional[str] = Field(None, alias="safetyKidney")
    safety_claustrophobia: Optional[str] = Field(None, alias="safetyClaustrophobia")
    consent: Optional[bool] = None

    def to_form_data(self) -> Dict:
        """camelCase dict with unanswered fields left out."""
        return self.model_dump(by_alias=True, exclude_none=True)


class RiskContribution(BaseModel):
    rule_id: str
    points: int
    description: str


class RiskAssessmentResponse(BaseModel):
    """Classifier output."""
    tier: str
    label: str
    score: int
    age: Optional[int] = None
    factors: List[str] = []
    contributions: List[RiskContribution] = []
    explanation: str
    next_steps: List[str] = []


class ErrorResponse(BaseModel):
    error: str
    message: str
    retryable: Optional[bool] = None
    errors: Optional[Dict[str, str]] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
