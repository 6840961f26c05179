"""
Unit Tests for Screening Request composition.

Covers section content and wording, reference IDs, filenames and the
render failure contract. Uses a recording renderer so no PDF is built.
"""
import random
import re
from dataclasses import replace
from datetime import datetime

import pytest

pytest.importorskip("reportlab")

from prost_health.core.intake import IntakeRecord, SafetyFlag, Symptom, YesNo
from prost_health.core.reports import BlockKind, DocumentRenderer, ReportComposer
from prost_health.core.risk import RiskClassifier, RiskTier
from prost_health.utils import RenderFailureError, USER_FACING_MESSAGE


class RecordingRenderer(DocumentRenderer):
    name = "recording"

    def __init__(self):
        self.documents = []

    def render(self, document):
        self.documents.append(document)
        return b"%PDF-fake"


class FailingRenderer(DocumentRenderer):
    name = "failing"

    def render(self, document):
        raise OSError("font cache is corrupt")


class EmptyRenderer(DocumentRenderer):
    name = "empty"

    def render(self, document):
        return b""


@pytest.fixture
def composer(seeded_rng) -> ReportComposer:
    return ReportComposer(renderer=RecordingRenderer(), rng=seeded_rng)


def _compose(composer, record, generated_at, today, assessment=None):
    assessment = assessment or RiskClassifier().classify(record, today=today)
    return composer.compose(record, assessment, generated_at, "PH-20250601-ABC123")


class TestSections:

    def test_section_order(self, composer, low_risk_record, generated_at, today):
        document = _compose(composer, low_risk_record, generated_at, today)

        assert [s.title for s in document.sections] == [
            "Patient Information",
            "Clinical Risk Assessment",
            "Risk Factor Assessment",
            "Current Symptoms",
            "Relevant Medical History",
            "MRI Safety Screening",
        ]

    def test_header_and_footer(self, composer, low_risk_record, generated_at, today):
        document = _compose(composer, low_risk_record, generated_at, today)

        assert document.header.brand == "Prost Health"
        assert document.header.date_issued == "1 June 2025"
        assert document.header.reference_id == "PH-20250601-ABC123"
        assert document.footer.generated == "1 June 2025 at 14:05"
        assert document.footer.company == "Prost Health Ltd"
        assert document.footer.notice == "This document is confidential"

    def test_patient_information(self, composer, high_risk_record, generated_at, today):
        section = _compose(composer, high_risk_record, generated_at, today).section("patient")

        assert section.value("Full Name") == "Kwame Mensah"
        assert section.value("Date of Birth") == "1 January 1960 (65y)"
        assert section.value("NHS Number") == "485-777-3456"
        assert section.value("GP Practice") == "Riverside Medical Centre"
        assert section.value("Address") == "12 Mill Lane, London, SE1 7PB"

    def test_missing_demographics(self, composer, low_risk_record, generated_at, today):
        section = _compose(composer, low_risk_record, generated_at, today).section("patient")

        for label in ("Phone Number", "NHS Number", "GP Practice", "Address"):
            assert section.value(label) == "Not provided"

    def test_clinical_risk(self, composer, high_risk_record, generated_at, today):
        section = _compose(composer, high_risk_record, generated_at, today).section("risk")
        blocks = section.blocks

        assert blocks[0].kind is BlockKind.BADGE
        assert blocks[0].text == "HIGH"
        assert blocks[1].text == (
            "Based on NICE NG131 Guidelines for prostate cancer screening eligibility"
        )
        factors = next(b for b in blocks if b.title == "Contributing Factors")
        assert "Elevated PSA level: 12 ng/mL" in factors.items
        assert any(b.title == "Recommended Next Steps" for b in blocks)

    def test_tier_only_assessment(self, composer, low_risk_record, generated_at, today):
        document = _compose(composer, low_risk_record, generated_at, today, assessment=RiskTier.MEDIUM)
        blocks = document.section("risk").blocks

        assert [b.kind for b in blocks] == [BlockKind.BADGE, BlockKind.TEXT]
        assert blocks[0].tone == "MEDIUM"

    def test_risk_factor_assessment(self, composer, high_risk_record, generated_at, today):
        section = _compose(composer, high_risk_record, generated_at, today).section("risk-factors")

        assert section.value("Age at Assessment") == "65 years"
        assert section.value("Ethnicity") == "Black African"
        assert section.value("Family History") == "Father"

    def test_symptom_categories(self, composer, low_risk_record, generated_at, today):
        record = replace(low_risk_record, symptoms=(Symptom.URINARY, Symptom.PAIN, Symptom.BLOOD))
        section = _compose(composer, record, generated_at, today).section("symptoms")

        assert section.value("Urinary Symptoms") == "Urinary"
        assert section.value("Other Symptoms") == "Pain, Blood"

    def test_nothing_reported_wording(self, composer, low_risk_record, generated_at, today):
        record = replace(low_risk_record, symptoms=(Symptom.NONE,), family_history=(), ethnicity=None)
        document = _compose(composer, record, generated_at, today)

        assert document.section("symptoms").value("Urinary Symptoms") == "None reported"
        assert document.section("symptoms").value("Other Symptoms") == "None reported"
        assert document.section("risk-factors").value("Family History") == "No family history reported"
        assert document.section("risk-factors").value("Ethnicity") == "Not provided"
        assert all(text.lower() != "none" for text in document.iter_text())

    def test_psa_rows_only_after_previous_test(self, composer, low_risk_record, high_risk_record,
                                               generated_at, today):
        without = _compose(composer, low_risk_record, generated_at, today).section("history")
        with_psa = _compose(composer, high_risk_record, generated_at, today).section("history")

        assert without.value("Previous PSA Test") == "No"
        assert without.value("Last PSA Result") is None
        assert with_psa.value("Previous PSA Test") == "Yes"
        assert with_psa.value("Last PSA Result") == "12 ng/mL"
        assert with_psa.value("Last PSA Date") == "20 January 2025"
        assert with_psa.value("Current Medications") == "Amlodipine 5mg"

    def test_missing_psa_details(self, composer, high_risk_record, generated_at, today):
        record = replace(high_risk_record, last_psa_result="", last_psa_date=None)
        section = _compose(composer, record, generated_at, today).section("history")

        assert section.value("Last PSA Result") == "N/A"
        assert section.value("Last PSA Date") == "N/A"


class TestMRISafety:

    def test_pacemaker_raises_warning(self, composer, low_risk_record, generated_at, today):
        record = replace(low_risk_record, safety={SafetyFlag.PACEMAKER: YesNo.YES})
        section = _compose(composer, record, generated_at, today).section("safety")

        assert section.value("Cardiac Pacemaker/ICD") == "Yes"
        warnings = [b for b in section.blocks if b.kind is BlockKind.WARNING]
        assert len(warnings) == 1
        assert warnings[0].title == "MRI Safety Review Required"
        assert "MRI safety officer" in warnings[0].text

    def test_no_flags_no_warning(self, composer, low_risk_record, generated_at, today):
        section = _compose(composer, low_risk_record, generated_at, today).section("safety")

        assert len(section.rows) == 6
        assert all(row.value == "No" for row in section.rows)
        assert not any(b.kind is BlockKind.WARNING for b in section.blocks)

    def test_claustrophobia_note(self, composer, low_risk_record, generated_at, today):
        record = replace(low_risk_record, safety={SafetyFlag.CLAUSTROPHOBIA: YesNo.YES})
        section = _compose(composer, record, generated_at, today).section("safety")

        notes = [b.text for b in section.blocks if b.kind is BlockKind.NOTE]
        assert "Patient may require Open Bore MRI due to claustrophobia." in notes


class TestIdentifiers:

    def test_reference_id_format(self, composer, generated_at):
        reference_id = composer.new_reference_id(generated_at)
        assert re.fullmatch(r"PH-20250601-[0-9A-Z]{6}", reference_id)

    def test_reference_id_reproducible_with_seed(self, generated_at):
        first = ReportComposer(RecordingRenderer(), rng=random.Random(7)).new_reference_id(generated_at)
        second = ReportComposer(RecordingRenderer(), rng=random.Random(7)).new_reference_id(generated_at)
        assert first == second

    def test_filename(self, low_risk_record, generated_at):
        filename = ReportComposer.suggested_filename(low_risk_record, generated_at)
        assert filename == "Prost_Health_Screening_Alan_Turner_2025-06-01.pdf"

    def test_filename_fallbacks(self, generated_at):
        filename = ReportComposer.suggested_filename(IntakeRecord(), generated_at)
        assert filename == "Prost_Health_Screening_Patient_Unknown_2025-06-01.pdf"

    def test_filename_is_sanitised(self, generated_at):
        record = IntakeRecord(first_name="Mary Ann", last_name="O'Brien/Smith")
        filename = ReportComposer.suggested_filename(record, generated_at)
        assert filename == "Prost_Health_Screening_Mary_Ann_O_Brien_Smith_2025-06-01.pdf"


class TestRender:

    def test_render_returns_bytes_and_metadata(self, composer, high_risk_record, generated_at, today):
        assessment = RiskClassifier().classify(high_risk_record, today=today)
        report = composer.render(high_risk_record, assessment, generated_at=generated_at)

        assert report.pdf_bytes == b"%PDF-fake"
        assert report.tier is RiskTier.HIGH
        assert report.filename.endswith("_Kwame_Mensah_2025-06-01.pdf")
        assert report.reference_id.startswith("PH-20250601-")
        assert report.document.header.reference_id == report.reference_id
        assert composer.renderer.documents == [report.document]

    def test_explicit_reference_id(self, composer, low_risk_record, generated_at):
        report = composer.render(low_risk_record, RiskTier.LOW, generated_at, reference_id="PH-X")
        assert report.reference_id == "PH-X"
        assert report.to_dict()["tier"] == "LOW"

    @pytest.mark.parametrize("renderer", [FailingRenderer(), EmptyRenderer()])
    def test_render_failure(self, renderer, low_risk_record, generated_at):
        composer = ReportComposer(renderer=renderer)

        with pytest.raises(RenderFailureError) as exc_info:
            composer.render(low_risk_record, RiskTier.LOW, generated_at)

        error = exc_info.value
        assert error.code == "RENDER_FAILURE"
        assert error.retryable is True
        assert error.message == USER_FACING_MESSAGE
        assert "font cache" not in str(error.to_public_dict())
