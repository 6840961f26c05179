"""
Screening Service

Runs the one-shot pipeline behind the API:
intake record -> risk classification -> screening request PDF.

Nothing is stored between calls; the service only holds the (stateless)
classifier and composer.
"""
from datetime import date, datetime
from typing import Optional, Union

from starlette.concurrency import run_in_threadpool

from prost_health.core.intake import IntakeRecord
from prost_health.core.risk import RiskAssessment, RiskClassifier, RiskTier
from prost_health.core.reports import ComposedReport, ReportComposer
from prost_health.utils import get_logger

logger = get_logger(__name__)


class ScreeningService:
    """
    Service for classifying intake answers and producing screening requests.
    """

    def __init__(
        self,
        classifier: Optional[RiskClassifier] = None,
        composer: Optional[ReportComposer] = None,
    ):
        self.classifier = classifier or RiskClassifier()
        self.composer = composer or ReportComposer()

    def assess(self, record: IntakeRecord, today: Optional[date] = None) -> RiskAssessment:
        return self.classifier.classify(record, today=today)

    def build_report(
        self,
        record: IntakeRecord,
        assessment: Optional[Union[RiskAssessment, RiskTier]] = None,
        generated_at: Optional[datetime] = None,
        reference_id: Optional[str] = None,
    ) -> ComposedReport:
        """
        Classify (unless an assessment is supplied) and render in one call.

        The record is classified as of the generation date so the age on
        the report matches the age that was scored.
        """
        generated_at = generated_at or datetime.now()
        if assessment is None:
            assessment = self.assess(record, today=generated_at.date())
        return self.composer.render(
            record,
            assessment,
            generated_at=generated_at,
            reference_id=reference_id,
        )

    async def generate_report(
        self,
        record: IntakeRecord,
        assessment: Optional[Union[RiskAssessment, RiskTier]] = None,
        generated_at: Optional[datetime] = None,
        reference_id: Optional[str] = None,
    ) -> ComposedReport:
        """Async wrapper; the reportlab build runs in a worker thread."""
        report = await run_in_threadpool(
            self.build_report,
            record,
            assessment,
            generated_at,
            reference_id,
        )
        logger.info("ScreeningService: report ready", extra={"reference_id": report.reference_id})
        return report
