"""
Analysis client against an httpx.MockTransport: request shape, transport status vs. body shape,
and the timeout kind.
"""

import json

import httpx
import pytest

from triage.client.analysis_client import ANALYSIS_PATH, AnalysisClient, parse_analysis_response
from triage.client.errors import (
    AnalysisHTTPError,
    AnalysisResponseFormatError,
    AnalysisTimeoutError,
    AnalysisTransportError,
)
from triage.schemas import SymptomEntry

SYMPTOMS = [
    SymptomEntry(name="headache", severity="moderate", duration="2 days"),
    SymptomEntry(name="fever", severity="mild", duration="1 day", description="38.2C"),
]

VALID_ANALYSIS = {
    "riskLevel": "medium",
    "urgency": "routine",
    "recommendations": ["Rest", "Stay hydrated"],
    "possibleConditions": [{"condition": "Common Viral Infection", "probability": 40, "description": "Viral."}],
    "followUpIn": "within 1-2 weeks",
}


def _client(handler) -> AnalysisClient:
    return AnalysisClient("http://triage.test", transport=httpx.MockTransport(handler))


def test_posts_symptoms_as_json_and_returns_analysis():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"analysis": VALID_ANALYSIS})

    result = _client(handler).analyze(SYMPTOMS)

    assert seen["method"] == "POST"
    assert seen["path"] == ANALYSIS_PATH
    assert seen["body"] == {
        "symptoms": [
            {"name": "headache", "severity": "moderate", "duration": "2 days", "description": ""},
            {"name": "fever", "severity": "mild", "duration": "1 day", "description": "38.2C"},
        ]
    }
    assert result.risk_level == "medium"
    assert result.urgency == "routine"
    assert result.recommendations == ["Rest", "Stay hydrated"]
    assert result.possible_conditions[0].probability == 40
    assert result.follow_up_in == "within 1-2 weeks"


def test_non_2xx_uses_error_field_from_body():
    client = _client(lambda r: httpx.Response(400, json={"error": "Invalid symptoms data"}))
    with pytest.raises(AnalysisHTTPError) as exc:
        client.analyze(SYMPTOMS)
    assert exc.value.status_code == 400
    assert exc.value.message == "Invalid symptoms data"


def test_non_2xx_without_error_field_uses_generic_message():
    client = _client(lambda r: httpx.Response(502, text="Bad gateway"))
    with pytest.raises(AnalysisHTTPError) as exc:
        client.analyze(SYMPTOMS)
    assert exc.value.message == "Failed to analyze symptoms"


def test_2xx_without_analysis_is_format_error():
    client = _client(lambda r: httpx.Response(200, json={}))
    with pytest.raises(AnalysisResponseFormatError, match="Invalid response format"):
        client.analyze(SYMPTOMS)


def test_2xx_analysis_without_risk_level_is_format_error():
    body = {"analysis": {k: v for k, v in VALID_ANALYSIS.items() if k != "riskLevel"}}
    client = _client(lambda r: httpx.Response(200, json=body))
    with pytest.raises(AnalysisResponseFormatError):
        client.analyze(SYMPTOMS)


def test_2xx_non_json_body_is_format_error():
    client = _client(lambda r: httpx.Response(200, text="<html>ok</html>"))
    with pytest.raises(AnalysisResponseFormatError):
        client.analyze(SYMPTOMS)


def test_timeout_is_its_own_error_kind():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(AnalysisTimeoutError):
        _client(handler).analyze(SYMPTOMS)


def test_connection_failure_is_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AnalysisTransportError):
        _client(handler).analyze(SYMPTOMS)


def test_default_timeout_is_thirty_seconds():
    assert AnalysisClient("http://triage.test").timeout_sec == 30


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        {"analysis": None},
        {"analysis": "critical"},
        {"analysis": {"riskLevel": ""}},
        {"analysis": {"riskLevel": "extreme"}},
    ],
)
def test_parse_analysis_response_rejects_bad_shapes(payload):
    with pytest.raises(AnalysisResponseFormatError):
        parse_analysis_response(payload)


def test_parse_analysis_response_reads_telemetry():
    payload = {"analysis": {**VALID_ANALYSIS, "telemetry": {"fallbackUsed": True, "cached": False}}}
    result = parse_analysis_response(payload)
    assert result.telemetry is not None
    assert result.telemetry.fallback_used is True
    assert result.telemetry.cached is False
