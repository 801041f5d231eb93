import json
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import Body, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from db import init_db
from repo import get_symptom_check, save_symptom_check
from triage.analysis.symptom_analyzer import analyze_symptoms
from triage.logging_structured import (
    generate_request_id,
    get_metrics,
    log_request,
    log_sms_failed,
    log_sms_sent,
    log_symptom_check_save_failed,
)
from triage.schemas import MessageType, SymptomEntry
from triage.sms.sender import SmsSendError, is_sms_configured, send_sms


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Symptom Triage API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> dict:
    """Basic counters as JSON (no Prometheus)."""
    return get_metrics()


INVALID_SYMPTOMS_BODY = {"error": "Invalid symptoms data"}


def _sms_bad_request(errors: list) -> dict:
    return {"error": "Bad Request", "message": "Invalid request data", "validation": errors}


SMS_NOT_CONFIGURED_BODY = {
    "error": "Service Unavailable",
    "message": "SMS service is not configured",
    "code": "SMS_NOT_CONFIGURED",
}


@app.exception_handler(RequestValidationError)
async def body_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Bodies that are not JSON never reach the handlers; answer them with each route's own error body."""
    route = request.url.path
    if route == "/api/symptom-check":
        body, status_code = INVALID_SYMPTOMS_BODY, 400
    elif route == "/api/sms" and not is_sms_configured():
        body, status_code = SMS_NOT_CONFIGURED_BODY, 503
    elif route == "/api/sms":
        body, status_code = _sms_bad_request(jsonable_encoder(exc.errors())), 400
    else:
        return await request_validation_exception_handler(request, exc)
    log_request(request_id=generate_request_id(), route=route, latency_ms=0, status_code=status_code)
    return JSONResponse(body, status_code=status_code)


class SymptomCheckRequest(BaseModel):
    symptoms: list[SymptomEntry] = Field(..., min_length=1)


class SmsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_type: MessageType = Field(..., alias="messageType")
    phone_number: str = Field(..., alias="phoneNumber", pattern=r"^\+[1-9]\d{1,14}$")
    recipient_name: str | None = Field(default=None, alias="recipientName")
    content: str = Field(..., min_length=3)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


@app.post("/api/symptom-check")
def symptom_check(payload: Any = Body(default=None)) -> JSONResponse:
    request_id = generate_request_id()
    start = time.perf_counter()
    route = "/api/symptom-check"

    try:
        request = SymptomCheckRequest.model_validate(payload)
    except ValidationError:
        log_request(request_id=request_id, route=route, latency_ms=_elapsed_ms(start), status_code=400)
        return JSONResponse(INVALID_SYMPTOMS_BODY, status_code=400)

    try:
        analysis = analyze_symptoms(request.symptoms)
    except Exception:
        log_request(
            request_id=request_id,
            route=route,
            latency_ms=_elapsed_ms(start),
            status_code=500,
            symptom_count=len(request.symptoms),
        )
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    check_id: int | None = None
    try:
        check_id = save_symptom_check(request.symptoms, analysis)
    except Exception as e:
        # persistence is best effort; the analysis is still returned
        log_symptom_check_save_failed(request_id=request_id, error=str(e))

    telemetry = analysis.telemetry
    log_request(
        request_id=request_id,
        route=route,
        latency_ms=_elapsed_ms(start),
        status_code=200,
        risk_level=analysis.risk_level,
        urgency=analysis.urgency,
        symptom_count=len(request.symptoms),
        fallback_used=bool(telemetry and telemetry.fallback_used),
        cached=bool(telemetry and telemetry.cached),
    )
    return JSONResponse(
        {
            "analysis": analysis.to_wire(),
            "message": "Symptoms analyzed successfully",
            "checkId": check_id,
        }
    )


@app.get("/api/symptom-checks/{check_id}")
def symptom_check_detail(check_id: int) -> JSONResponse:
    check = get_symptom_check(check_id)
    if check is None:
        return JSONResponse({"error": "Not found"}, status_code=404)
    return JSONResponse(check)


@app.post("/api/sms")
def sms(payload: Any = Body(default=None)) -> JSONResponse:
    request_id = generate_request_id()
    start = time.perf_counter()
    route = "/api/sms"

    if not is_sms_configured():
        log_request(request_id=request_id, route=route, latency_ms=_elapsed_ms(start), status_code=503)
        return JSONResponse(SMS_NOT_CONFIGURED_BODY, status_code=503)

    try:
        request = SmsRequest.model_validate(payload)
    except ValidationError as e:
        log_request(request_id=request_id, route=route, latency_ms=_elapsed_ms(start), status_code=400)
        return JSONResponse(_sms_bad_request(json.loads(e.json(include_url=False))), status_code=400)

    try:
        result = send_sms(request.phone_number, request.content)
    except SmsSendError as e:
        log_sms_failed(phone_number=request.phone_number, error=f"{e.code}: {e}")
        log_request(request_id=request_id, route=route, latency_ms=_elapsed_ms(start), status_code=500)
        return JSONResponse(
            {"error": "Internal Server Error", "message": "Failed to send SMS", "code": "SMS_SEND_FAILED"},
            status_code=500,
        )

    log_sms_sent(phone_number=request.phone_number, message_type=request.message_type, message_id=result.message_id)
    log_request(request_id=request_id, route=route, latency_ms=_elapsed_ms(start), status_code=200)
    return JSONResponse(
        {
            "success": True,
            "messageId": result.message_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )
