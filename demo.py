"""
End-to-End Demo Script for Prost Health Screening

Walks the full pipeline with sample patients:
1. Multi-step intake form
2. Risk classification
3. Screening Request PDF generation

Run: python demo.py [output_dir]
"""
import sys
from datetime import date, datetime
from pathlib import Path

from prost_health.core.intake import FormStep, IntakeForm
from prost_health.core.risk import RiskClassifier
from prost_health.core.reports import ReportComposer
from prost_health.utils import setup_logging

SAMPLE_PATIENTS = {
    "low": {
        FormStep.PERSONAL_DETAILS: {
            "firstName": "Alan", "lastName": "Turner", "dateOfBirth": "1980-03-03",
            "email": "alan.turner@example.com", "phone": "+44 7700 900123",
        },
        FormStep.MEDICAL_HISTORY: {
            "previousPSA": "no", "previousBiopsy": "no", "previousMRI": "no",
        },
        FormStep.RISK_FACTORS: {
            "familyHistory": [], "symptoms": ["none"], "ethnicity": "white",
        },
        FormStep.SAFETY_CONSENT: {"consent": True},
    },
    "high": {
        FormStep.PERSONAL_DETAILS: {
            "firstName": "Kwame", "lastName": "Mensah", "dateOfBirth": "1958-06-14",
            "email": "k.mensah@example.com", "phone": "020 7946 0000",
            "nhsNumber": "485-777-3456", "gpPractice": "Riverside Medical Centre",
            "addressLine1": "12 Mill Lane", "city": "London", "postcode": "SE1 7PB",
        },
        FormStep.MEDICAL_HISTORY: {
            "previousPSA": "yes", "lastPSADate": "2025-01-20", "lastPSAResult": "12",
            "previousBiopsy": "no", "previousMRI": "no", "medications": "Amlodipine 5mg",
        },
        FormStep.RISK_FACTORS: {
            "familyHistory": ["father"], "symptoms": ["urinary", "blood"],
            "ethnicity": "black-african",
        },
        FormStep.SAFETY_CONSENT: {
            "safetyPacemaker": "yes", "safetyClaustrophobia": "yes", "consent": True,
        },
    },
}


def main(output_dir: Path) -> None:
    print("=" * 60)
    print("PROST HEALTH SCREENING - END-TO-END DEMO")
    print("=" * 60)

    output_dir.mkdir(parents=True, exist_ok=True)
    classifier = RiskClassifier()
    composer = ReportComposer()
    today = date.today()

    for name, steps in SAMPLE_PATIENTS.items():
        print(f"\n[{name}] Filling intake form...")
        form = IntakeForm.start(today=today)
        for step, answers in steps.items():
            form = form.submit_step(step, answers)
            print(f"   ✓ Step {step.number}/{form.total_steps}: {step.value}")
        record = form.build_record()

        assessment = classifier.classify(record, today=today)
        print(f"   Risk: {assessment.tier.label} (score {assessment.score})")
        for factor in assessment.factors:
            print(f"     - {factor}")

        report = composer.render(record, assessment, generated_at=datetime.now())
        path = output_dir / report.filename
        path.write_bytes(report.pdf_bytes)
        print(f"   ✓ {report.reference_id} -> {path} ({len(report.pdf_bytes)} bytes)")

    print("\nDone.")


if __name__ == "__main__":
    setup_logging("WARNING")
    main(Path(sys.argv[1]) if len(sys.argv) > 1 else Path("reports"))
