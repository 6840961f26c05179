"""
Pytest Configuration and Fixtures

Shared fixtures for screening pipeline tests.
"""
import random
from datetime import date, datetime

import pytest

from prost_health.core.intake import (
    Ethnicity, FamilyRelation, IntakeRecord, SafetyFlag, Symptom, YesNo,
)

TODAY = date(2025, 6, 1)
GENERATED_AT = datetime(2025, 6, 1, 14, 5)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def generated_at() -> datetime:
    return GENERATED_AT


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def low_risk_record() -> IntakeRecord:
    """Age 45, no family history, no symptoms, never had a PSA test."""
    return IntakeRecord(
        first_name="Alan",
        last_name="Turner",
        date_of_birth=date(1980, 3, 3),
        email="alan.turner@example.com",
        previous_psa=YesNo.NO,
        symptoms=(Symptom.NONE,),
        ethnicity=Ethnicity.WHITE,
    )


@pytest.fixture
def high_risk_record() -> IntakeRecord:
    """Age 65, father affected, Black African, blood in urine, PSA 12."""
    return IntakeRecord(
        first_name="Kwame",
        last_name="Mensah",
        date_of_birth=date(1960, 1, 1),
        email="k.mensah@example.com",
        phone="020 7946 0000",
        nhs_number="485-777-3456",
        gp_practice="Riverside Medical Centre",
        address_line1="12 Mill Lane",
        city="London",
        postcode="SE1 7PB",
        previous_psa=YesNo.YES,
        last_psa_date=date(2025, 1, 20),
        last_psa_result="12",
        medications="Amlodipine 5mg",
        family_history=(FamilyRelation.FATHER,),
        symptoms=(Symptom.BLOOD,),
        ethnicity=Ethnicity.BLACK_AFRICAN,
        safety={SafetyFlag.PACEMAKER: YesNo.YES},
        consent=True,
    )


@pytest.fixture
def form_answers() -> dict:
    """Flat camelCase answers as the browser form posts them."""
    return {
        "firstName": "Alan",
        "lastName": "Turner",
        "dateOfBirth": "1980-03-03",
        "email": "alan.turner@example.com",
        "phone": "+44 7700 900123",
        "nhsNumber": "123-456-7890",
        "gpPractice": "Hillside Surgery",
        "previousPSA": "no",
        "previousBiopsy": "no",
        "previousMRI": "no",
        "familyHistory": [],
        "symptoms": ["none"],
        "ethnicity": "white",
        "safetyPacemaker": "no",
        "safetyClips": "no",
        "safetyImplants": "no",
        "safetyMetal": "no",
        "safetyKidney": "no",
        "safetyClaustrophobia": "no",
        "consent": True,
    }
