"""
Public Health Risk Engine - FastAPI Application

Main application entry point with API endpoints for:
- Stateless risk evaluation
- Per-user assessment history
- Advisory recommendations
- Consultation alerts
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Body, Depends, Query, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from typing import Dict, Any, Optional
from datetime import datetime
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from healthrisk.config import settings
from healthrisk.core.errors import InvalidInput, RecordNotFound
from healthrisk.models.assessment import (
    AssessmentRecordResponse,
    ConsultationRequest,
    ConsultationResponse,
    HealthResponse,
    HistoryResponse,
    RecommendationResponse,
    RiskResultModel,
)
from healthrisk.services.screening import AssessmentService
from healthrisk.utils import configure_logging, get_logger

configure_logging(settings.log_level)
logger = get_logger(__name__)


# ---- Application Lifecycle ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the shared service on startup, log shutdown."""
    logger.info(f"{settings.app_name} API starting up...")
    get_service()
    logger.info("API ready to accept requests")
    yield
    logger.info(f"{settings.app_name} API shutting down...")


# ---- FastAPI Application ----

app = FastAPI(
    title=f"{settings.app_name} API",
    description="Linear public-health risk scoring with explainable factor breakdown",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- Service (in-memory history; replace store with a database in production) ----
_service: Optional[AssessmentService] = None


def get_service() -> AssessmentService:
    """Shared AssessmentService, created on first use."""
    global _service
    if _service is None:
        _service = AssessmentService()
    return _service


# ---- Error Handlers ----

@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    logger.info(f"Rejected assessment on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=422, content=exc.to_dict())


@app.exception_handler(RecordNotFound)
async def not_found_handler(request: Request, exc: RecordNotFound):
    return JSONResponse(status_code=404, content=exc.to_dict())


# ---- API Endpoints ----

@app.get("/", response_model=HealthResponse, tags=["Health"])
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        timestamp=datetime.now().isoformat(),
        components={
            "risk_engine": "ready",
            "history": "in_memory",
            "advisor": "configured" if settings.gemini_api_key else "fallback",
            "notifications": "configured" if settings.notification_endpoint else "disabled",
        }
    )


@app.post(f"{settings.api_prefix}/risk/evaluate", response_model=RiskResultModel, tags=["Risk"])
async def evaluate_risk(
    payload: Dict[str, Any] = Body(...),
    service: AssessmentService = Depends(get_service)
):
    """
    Score an assessment without storing it.
    """
    return service.evaluate(payload).to_dict()


@app.post(
    f"{settings.api_prefix}/users/{{user_id}}/assessments",
    response_model=AssessmentRecordResponse,
    status_code=201,
    tags=["Assessments"]
)
async def submit_assessment(
    user_id: str,
    payload: Dict[str, Any] = Body(...),
    service: AssessmentService = Depends(get_service)
):
    """
    Score an assessment, store it in the user's history and attach the
    one-sentence root cause.
    """
    outcome = await service.submit(user_id, payload)
    return {
        "userId": user_id,
        "result": outcome["record"].result.to_dict(),
        "rootCause": outcome["root_cause"],
    }


@app.get(
    f"{settings.api_prefix}/users/{{user_id}}/assessments",
    response_model=HistoryResponse,
    tags=["Assessments"]
)
async def list_assessments(
    user_id: str,
    limit: Optional[int] = Query(None, ge=1, description="Maximum records to return"),
    service: AssessmentService = Depends(get_service)
):
    """
    Assessment history, newest first.
    """
    records = service.history(user_id, limit=limit)
    return {
        "userId": user_id,
        "records": [r.result.to_dict() for r in records],
        "total": service.store.count(user_id),
        "trend": service.trend(user_id),
    }


@app.get(
    f"{settings.api_prefix}/users/{{user_id}}/assessments/latest",
    response_model=RiskResultModel,
    tags=["Assessments"]
)
async def latest_assessment(
    user_id: str,
    service: AssessmentService = Depends(get_service)
):
    return service.latest(user_id).result.to_dict()


@app.delete(f"{settings.api_prefix}/users/{{user_id}}/assessments/{{assessment_id}}", tags=["Assessments"])
async def delete_assessment(
    user_id: str,
    assessment_id: str,
    service: AssessmentService = Depends(get_service)
):
    service.delete(user_id, assessment_id)
    return {"deleted": assessment_id}


@app.get(
    f"{settings.api_prefix}/users/{{user_id}}/recommendations",
    response_model=RecommendationResponse,
    tags=["Advisory"]
)
async def get_recommendations(
    user_id: str,
    service: AssessmentService = Depends(get_service)
):
    """
    Clinical advisory dossier for the latest assessment.
    """
    outcome = await service.recommendations(user_id)
    return {
        "userId": user_id,
        "result": outcome["record"].result.to_dict(),
        "dossier": outcome["dossier"],
    }


@app.post(
    f"{settings.api_prefix}/consultations/notify",
    response_model=ConsultationResponse,
    tags=["Advisory"]
)
async def notify_consultation(
    request: ConsultationRequest,
    service: AssessmentService = Depends(get_service)
):
    """
    Email a doctor about a patient's consultation request (best-effort).
    """
    return service.request_consultation(
        patient_id=request.patient_id,
        patient_name=request.patient_name,
        patient_email=request.patient_email,
        message=request.message,
        doctor_name=request.doctor_name,
        doctor_email=request.doctor_email,
        pincode_city=request.pincode_city,
        consultation_id=request.consultation_id,
        kind=request.kind,
    )


@app.get(f"{settings.api_prefix}/reference/weights", tags=["Reference"])
async def list_weights(service: AssessmentService = Depends(get_service)):
    """
    Weight tables used by the risk engine.
    """
    return service.risk_engine.weights.to_dict()


def run():
    """Console entry point: serve the API with uvicorn."""
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


# ---- Run with uvicorn ----
if __name__ == "__main__":
    run()
