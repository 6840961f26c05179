"""
Prost Health Screening - FastAPI Application

API endpoints for:
- Health checks
- Risk assessment from intake answers
- Screening Request PDF download
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from prost_health import config
from prost_health.core.intake import IntakeForm
from prost_health.models.screening import (
    ErrorResponse,
    HealthResponse,
    RiskAssessmentResponse,
    ScreeningAnswers,
)
from prost_health.services.screening import ScreeningService
from prost_health.utils import (
    get_logger,
    setup_logging,
    InvalidInputError,
    IntakeValidationError,
    RenderFailureError,
    ScreeningError,
)

setup_logging(config.LOG_LEVEL, config.LOG_FILE or None)
logger = get_logger(__name__)

START_TIME = datetime.now()

# ---- Unified Services ----
_screening_service = ScreeningService()


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.screening_service = _screening_service
    logger.info(f"{config.BRAND_NAME} screening API v{config.VERSION} ready")
    yield
    logger.info(f"{config.BRAND_NAME} screening API shut down.")


# ---- FastAPI Application ----

app = FastAPI(
    title="Prost Health Screening API",
    description="Prostate cancer risk assessment and MRI screening request generation",
    version=config.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Reference-Id"],
)


# ---- Error Handlers ----

@app.exception_handler(IntakeValidationError)
async def intake_validation_handler(request: Request, exc: IntakeValidationError):
    logger.info(f"Intake rejected at step '{exc.step}': {sorted(exc.errors)}")
    return JSONResponse(status_code=422, content=exc.to_public_dict())


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    logger.warning(f"Invalid input: {exc.message} (field={exc.field})")
    return JSONResponse(status_code=422, content=exc.to_public_dict())


@app.exception_handler(RenderFailureError)
async def render_failure_handler(request: Request, exc: RenderFailureError):
    logger.error(f"Render failure: {exc.message} (renderer={exc.renderer})")
    return JSONResponse(status_code=500, content=exc.to_public_dict())


@app.exception_handler(ScreeningError)
async def screening_error_handler(request: Request, exc: ScreeningError):
    logger.error(f"Screening error [{exc.code}]: {exc.message}")
    return JSONResponse(status_code=500, content=exc.to_public_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors: Dict[str, str] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        errors.setdefault(loc[0] if loc else "__all__", err.get("msg", "Invalid value"))
    wrapped = IntakeValidationError("Request body failed validation", step="request", errors=errors)
    return JSONResponse(status_code=422, content=wrapped.to_public_dict())


# ---- Utility Functions ----

def _content_disposition(filename: str) -> str:
    return f'attachment; filename="{filename}"'


def _health() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=config.VERSION,
        timestamp=datetime.now().isoformat(),
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
    )


# ---- API Endpoints ----

@app.get("/", response_model=HealthResponse, tags=["Health"])
async def root():
    """API root - health check."""
    return _health()


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return _health()


@app.post(
    "/api/v1/risk-assessment",
    response_model=RiskAssessmentResponse,
    responses={422: {"model": ErrorResponse}},
    tags=["Screening"],
)
async def risk_assessment(answers: ScreeningAnswers):
    """
    Classify completed intake answers into a LOW / MEDIUM / HIGH tier.
    """
    record = IntakeForm.from_answers(answers.to_form_data())
    assessment = _screening_service.assess(record)
    return RiskAssessmentResponse(**assessment.to_dict())


@app.post(
    "/api/v1/screening-requests/pdf",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    tags=["Reports"],
)
async def screening_request_pdf(answers: ScreeningAnswers):
    """
    Build the "Screening Request" PDF for completed intake answers.

    The response is an attachment; the filename is in Content-Disposition
    and the document reference in X-Reference-Id.
    """
    record = IntakeForm.from_answers(answers.to_form_data())
    report = await _screening_service.generate_report(record)

    headers: Dict[str, Any] = {
        "Content-Disposition": _content_disposition(report.filename),
        "X-Reference-Id": report.reference_id,
        "X-Risk-Tier": report.tier.value,
    }
    return Response(content=report.pdf_bytes, media_type=report.content_type, headers=headers)


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
