"""
Structured JSON logging and in-memory metrics.
One JSON line per request or event on stderr; /metrics returns counters as JSON.
"""

import json
import sys
import uuid
from typing import Any

# In-memory counters for /metrics
_metrics: dict[str, int | dict[str, int]] = {
    "requests_total": 0,
    "by_risk_level": {},
    "emergency_short_circuits_total": 0,
    "analysis_fallbacks_total": 0,
    "analysis_cache_hits_total": 0,
    "sms_sent_total": 0,
    "sms_failed_total": 0,
}


def _emit(payload: dict[str, Any]) -> None:
    print(json.dumps(payload), file=sys.stderr, flush=True)


def _incr(key: str, amount: int = 1) -> None:
    _metrics[key] = (_metrics.get(key) or 0) + amount


def mask_phone(phone_number: str | None) -> str:
    """Keep the country prefix and the first digits only, e.g. +12345***."""
    if not phone_number:
        return ""
    return f"{phone_number[:6]}***"


def generate_request_id() -> str:
    return str(uuid.uuid4())


def log_request(
    *,
    request_id: str,
    route: str,
    latency_ms: float,
    status_code: int,
    risk_level: str | None = None,
    urgency: str | None = None,
    symptom_count: int = 0,
    fallback_used: bool = False,
    cached: bool = False,
) -> None:
    """Emit one JSON log line and update in-memory metrics. risk_level/urgency are the values returned to the caller."""
    _emit(
        {
            "request_id": request_id,
            "route": route,
            "latency_ms": round(latency_ms, 2),
            "status_code": status_code,
            "risk_level": risk_level,
            "urgency": urgency,
            "symptom_count": symptom_count,
            "fallback_used": fallback_used,
            "cached": cached,
        }
    )

    _incr("requests_total")
    if risk_level:
        by_level = _metrics.setdefault("by_risk_level", {})
        by_level[risk_level] = (by_level.get(risk_level) or 0) + 1


def get_metrics() -> dict[str, Any]:
    """Return current counters as JSON-serializable dict."""
    return {
        "requests_total": _metrics.get("requests_total", 0),
        "by_risk_level": dict(_metrics.get("by_risk_level") or {}),
        "emergency_short_circuits_total": _metrics.get("emergency_short_circuits_total", 0),
        "analysis_fallbacks_total": _metrics.get("analysis_fallbacks_total", 0),
        "analysis_cache_hits_total": _metrics.get("analysis_cache_hits_total", 0),
        "sms_sent_total": _metrics.get("sms_sent_total", 0),
        "sms_failed_total": _metrics.get("sms_failed_total", 0),
    }


def log_emergency_short_circuit(*, matched_terms: list[str]) -> None:
    """Log when red-flag symptoms bypass the LLM and the cache."""
    _emit({"event": "emergency_short_circuit", "matched_terms": matched_terms})
    _incr("emergency_short_circuits_total")


def log_analysis_cache_hit() -> None:
    _emit({"event": "analysis_cache_hit"})
    _incr("analysis_cache_hits_total")


def log_analysis_fallback(*, reason: str) -> None:
    """Log when the deterministic fallback analysis replaced the LLM answer."""
    _emit({"event": "analysis_fallback", "reason": reason})
    _incr("analysis_fallbacks_total")


def log_llm_model_failed(*, model: str, error: str) -> None:
    _emit({"event": "llm_model_failed", "model": model, "error": error})


def log_llm_parse_failed(*, response_snippet: str) -> None:
    """Log when the LLM answer had no extractable JSON or did not match the schema."""
    _emit({"event": "llm_parse_failed", "response_snippet": response_snippet})


def log_llm_parse_repaired(*, model: str) -> None:
    _emit({"event": "llm_parse_repaired", "model": model})


def log_sms_sent(*, phone_number: str, message_type: str, message_id: str) -> None:
    _emit(
        {
            "event": "sms_sent",
            "phone_number": mask_phone(phone_number),
            "message_type": message_type,
            "message_id": message_id,
        }
    )
    _incr("sms_sent_total")


def log_sms_failed(*, phone_number: str, error: str) -> None:
    _emit({"event": "sms_failed", "phone_number": mask_phone(phone_number), "error": error})
    _incr("sms_failed_total")


def log_client_event(event: str, **fields: Any) -> None:
    """Log a symptom-checker client event (analysis_failed, escalation_sent, ...)."""
    payload = {"event": event}
    payload.update(fields)
    if "phone_number" in payload:
        payload["phone_number"] = mask_phone(payload["phone_number"])
    _emit(payload)


def log_symptom_check_save_failed(*, request_id: str, error: str) -> None:
    _emit({"event": "symptom_check_save_failed", "request_id": request_id, "error": error})
