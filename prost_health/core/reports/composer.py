"""
Screening Request Composer

Builds the screening-request document from an IntakeRecord and the
classifier's output, then hands it to a DocumentRenderer for PDF bytes.

Section order is fixed:
  header → Patient Information → Clinical Risk Assessment →
  Risk Factor Assessment → Current Symptoms → Relevant Medical History →
  MRI Safety Screening → footer (every page)

The composer never decides risk itself and never writes to disk; returning
bytes and a filename is the whole deliverable.
"""
from __future__ import annotations

import random
import re
import string
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union

from prost_health import config
from prost_health.core.intake import (
    IntakeRecord, OTHER_SYMPTOMS, URINARY_SYMPTOMS, SafetyFlag, YesNo,
)
from prost_health.core.risk import RiskAssessment, RiskTier
from prost_health.utils import get_logger, RenderFailureError, USER_FACING_MESSAGE
from .document import (
    Block, BlockKind, ReportDocument, ReportFooter, ReportHeader, Row, Section,
)
from .formatting import (
    NONE_REPORTED, NOT_AVAILABLE, NOT_PROVIDED,
    format_long_date, format_psa, format_tag_list, format_timestamp,
    or_default, title_case_tag, yes_no,
)
from .renderer import DocumentRenderer, ReportLabRenderer

logger = get_logger(__name__)

REFERENCE_PREFIX = "PH"
REFERENCE_ALPHABET = string.digits + string.ascii_uppercase   # base36
REFERENCE_LENGTH = 6

GUIDELINE_CITATION = (
    f"Based on {config.GUIDELINE_NAME} Guidelines for prostate cancer screening eligibility"
)

SAFETY_LABELS = {
    SafetyFlag.PACEMAKER: "Cardiac Pacemaker/ICD",
    SafetyFlag.ANEURYSM_CLIPS: "Aneurysm Clips",
    SafetyFlag.IMPLANTS: "Cochlear Implants",
    SafetyFlag.EYE_METAL_FRAGMENTS: "Metal Fragments (Eye)",
    SafetyFlag.KIDNEY_ISSUES: "Kidney/Renal Issues",
    SafetyFlag.CLAUSTROPHOBIA: "Claustrophobia",
}

SAFETY_REVIEW_TITLE = "MRI Safety Review Required"
SAFETY_REVIEW_TEXT = (
    "One or more safety concerns have been identified. This patient will require "
    "additional screening and approval from the MRI safety officer before proceeding "
    "with the examination."
)
OPEN_BORE_NOTE = "Patient may require Open Bore MRI due to claustrophobia."

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class ComposedReport:
    """Rendered screening request plus the metadata a caller needs to deliver it."""
    pdf_bytes: bytes
    filename: str
    reference_id: str
    generated_at: datetime
    tier: RiskTier
    document: ReportDocument

    content_type: str = "application/pdf"

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "reference_id": self.reference_id,
            "generated_at": self.generated_at.isoformat(),
            "tier": self.tier.value,
            "size_bytes": len(self.pdf_bytes),
        }


class ReportComposer:
    """
    Composes and renders screening-request documents.

    Holds no per-request state; the injected `rng` is only used for reference
    IDs, so a seeded generator gives reproducible output.
    """

    def __init__(
        self,
        renderer: Optional[DocumentRenderer] = None,
        rng: Optional[random.Random] = None,
    ):
        self.renderer = renderer or ReportLabRenderer()
        self._rng = rng or random.SystemRandom()
        logger.info(f"ReportComposer initialized, renderer: {self.renderer.name}")

    # ── Identifiers ──────────────────────────────────────────────────────────

    def new_reference_id(self, generated_at: datetime) -> str:
        """PH-YYYYMMDD-XXXXXX (six uppercase base36 characters)."""
        suffix = "".join(self._rng.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_LENGTH))
        return f"{REFERENCE_PREFIX}-{generated_at:%Y%m%d}-{suffix}"

    @staticmethod
    def suggested_filename(record: IntakeRecord, generated_at: datetime) -> str:
        """<prefix>_<FirstName>_<LastName>_<YYYY-MM-DD>.pdf"""
        first = _filename_part(record.first_name) or "Patient"
        last = _filename_part(record.last_name) or "Unknown"
        return f"{config.FILENAME_PREFIX}_{first}_{last}_{generated_at:%Y-%m-%d}.pdf"

    # ── Composition ──────────────────────────────────────────────────────────

    def compose(
        self,
        record: IntakeRecord,
        assessment: Union[RiskAssessment, RiskTier],
        generated_at: datetime,
        reference_id: str,
    ) -> ReportDocument:
        """
        Build the data-only document description.

        Args:
            record: Frozen intake answers
            assessment: Full classifier output, or just a tier (no factor list)
            generated_at: Generation timestamp (also the "age at assessment" date)
            reference_id: Opaque document identifier
        """
        if isinstance(assessment, RiskTier):
            tier, factors, guidance = assessment, [], None
        else:
            tier, factors, guidance = assessment.tier, assessment.factors, assessment.guidance

        header = ReportHeader(
            brand=config.BRAND_NAME,
            tagline=config.BRAND_TAGLINE,
            title="Screening Request Form",
            subtitle=f"Patient Assessment Summary - {config.GUIDELINE_NAME} Guidelines",
            contact=(config.CONTACT_EMAIL, config.SITE_URL),
            date_issued=format_long_date(generated_at.date()),
            reference_id=reference_id,
        )

        sections = (
            self._patient_information(record, generated_at),
            self._clinical_risk(tier, factors, guidance),
            self._risk_factors(record, generated_at),
            self._symptoms(record),
            self._medical_history(record),
            self._mri_safety(record),
        )

        footer = ReportFooter(
            generated=format_timestamp(generated_at),
            reference_id=reference_id,
            company=config.COMPANY_NAME,
        )

        return ReportDocument(
            header=header,
            sections=sections,
            footer=footer,
            title=f"{config.BRAND_NAME} - Screening Request",
            author=config.BRAND_NAME,
            keywords=(reference_id, tier.value),
        )

    def _patient_information(self, record: IntakeRecord, generated_at: datetime) -> Section:
        dob = format_long_date(record.date_of_birth)
        age = record.age_on(generated_at.date())
        if age is not None:
            dob = f"{dob} ({age}y)"

        address = ", ".join(
            p.strip() for p in (record.address_line1, record.address_line2, record.city, record.postcode)
            if p and p.strip()
        )

        return Section("patient", "Patient Information", (
            Row("Full Name", or_default(record.full_name)),
            Row("Date of Birth", dob),
            Row("Email Address", or_default(record.email)),
            Row("Phone Number", or_default(record.phone)),
            Row("NHS Number", or_default(record.nhs_number)),
            Row("GP Practice", or_default(record.gp_practice)),
            Row("Address", or_default(address)),
        ))

    def _clinical_risk(self, tier: RiskTier, factors: List[str], guidance) -> Section:
        items = [
            Block(BlockKind.BADGE, text=tier.value, tone=tier.value),
            Block(BlockKind.TEXT, text=GUIDELINE_CITATION),
        ]
        if factors:
            items.append(Block(BlockKind.BULLETS, title="Contributing Factors", items=tuple(factors)))
        if guidance is not None:
            items.append(Block(BlockKind.TEXT, text=guidance.explanation))
            items.append(Block(BlockKind.BULLETS, title="Recommended Next Steps",
                               items=tuple(guidance.next_steps)))
        return Section("risk", "Clinical Risk Assessment", tuple(items))

    def _risk_factors(self, record: IntakeRecord, generated_at: datetime) -> Section:
        age = record.age_on(generated_at.date())
        return Section("risk-factors", "Risk Factor Assessment", (
            Row("Age at Assessment", f"{age} years" if age is not None else NOT_AVAILABLE),
            Row("Ethnicity", title_case_tag(record.ethnicity) if record.ethnicity else NOT_PROVIDED),
            Row("Family History",
                format_tag_list(record.family_history, empty="No family history reported")),
        ))

    def _symptoms(self, record: IntakeRecord) -> Section:
        symptoms = record.real_symptoms
        urinary = [s for s in symptoms if s in URINARY_SYMPTOMS]
        other = [s for s in symptoms if s in OTHER_SYMPTOMS]
        return Section("symptoms", "Current Symptoms", (
            Row("Urinary Symptoms", format_tag_list(urinary, empty=NONE_REPORTED)),
            Row("Other Symptoms", format_tag_list(other, empty=NONE_REPORTED)),
        ))

    def _medical_history(self, record: IntakeRecord) -> Section:
        rows = [Row("Previous PSA Test", yes_no(record.previous_psa))]
        if record.previous_psa is YesNo.YES:
            rows.append(Row("Last PSA Result", format_psa(record.psa_value)))
            rows.append(Row("Last PSA Date", format_long_date(record.psa_date, missing=NOT_AVAILABLE)))
        rows.extend([
            Row("Previous Prostate Biopsy", yes_no(record.previous_biopsy)),
            Row("Previous Prostate MRI", yes_no(record.previous_mri)),
            Row("Current Medications", or_default(record.medications, NONE_REPORTED)),
        ])
        return Section("history", "Relevant Medical History", tuple(rows))

    def _mri_safety(self, record: IntakeRecord) -> Section:
        items: list = [Block(BlockKind.NOTE, text=(
            "The following safety questions are required for MRI eligibility assessment."
        ))]
        items.extend(Row(SAFETY_LABELS[flag], yes_no(record.safety[flag])) for flag in SafetyFlag)

        if record.has_safety_concerns:
            items.append(Block(BlockKind.WARNING, title=SAFETY_REVIEW_TITLE, text=SAFETY_REVIEW_TEXT))
            if record.safety[SafetyFlag.CLAUSTROPHOBIA] is YesNo.YES:
                items.append(Block(BlockKind.NOTE, text=OPEN_BORE_NOTE))
        return Section("safety", "MRI Safety Screening", tuple(items))

    # ── Rendering ────────────────────────────────────────────────────────────

    def render(
        self,
        record: IntakeRecord,
        assessment: Union[RiskAssessment, RiskTier],
        generated_at: Optional[datetime] = None,
        reference_id: Optional[str] = None,
    ) -> ComposedReport:
        """
        Compose and render the screening request.

        Raises:
            RenderFailureError: if the renderer fails; no partial bytes escape
        """
        generated_at = generated_at or datetime.now()
        reference_id = reference_id or self.new_reference_id(generated_at)
        document = self.compose(record, assessment, generated_at, reference_id)

        try:
            pdf_bytes = self.renderer.render(document)
        except Exception as exc:
            logger.error(
                f"ReportComposer: renderer '{self.renderer.name}' raised {exc}",
                exc_info=True,
                extra={"reference_id": reference_id},
            )
            raise RenderFailureError(
                USER_FACING_MESSAGE, renderer=self.renderer.name,
            ) from exc

        if not pdf_bytes:
            logger.error("ReportComposer: renderer returned no bytes", extra={"reference_id": reference_id})
            raise RenderFailureError(USER_FACING_MESSAGE, renderer=self.renderer.name)

        tier = assessment if isinstance(assessment, RiskTier) else assessment.tier
        logger.info(
            f"Screening request generated ({len(pdf_bytes)} bytes, {tier.value})",
            extra={"reference_id": reference_id},
        )

        return ComposedReport(
            pdf_bytes=pdf_bytes,
            filename=self.suggested_filename(record, generated_at),
            reference_id=reference_id,
            generated_at=generated_at,
            tier=tier,
            document=document,
        )


def _filename_part(name: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", name.strip()).strip("_")
