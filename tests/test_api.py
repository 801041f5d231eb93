"""
HTTP surface: /api/symptom-check (fallback path, no LLM key), stored check lookup, /api/sms with
the sender patched.
"""

from unittest.mock import patch

import pytest
from botocore.exceptions import NoRegionError
from fastapi.testclient import TestClient

import main
from triage.sms import sender
from triage.sms.sender import SmsResult, SmsSendError

HEADACHE = {"name": "headache", "severity": "moderate", "duration": "2 days", "description": "dull"}
ALERT = {
    "messageType": "alert",
    "phoneNumber": "+1234567890",
    "recipientName": "John Doe",
    "content": "MEDICAL ALERT: headache, fever. Please seek medical attention immediately.",
}


@pytest.fixture
def client():
    with TestClient(main.app) as c:
        yield c


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_symptom_check_returns_analysis_and_check_id(client):
    r = client.post("/api/symptom-check", json={"symptoms": [HEADACHE]})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Symptoms analyzed successfully"
    assert body["analysis"]["riskLevel"] == "medium"
    assert body["analysis"]["telemetry"]["fallbackUsed"] is True
    assert "possibleConditions" in body["analysis"]
    assert isinstance(body["checkId"], int)


def test_symptom_check_emergency(client):
    chest = {"name": "chest pain", "severity": "severe", "duration": "1 hour"}
    r = client.post("/api/symptom-check", json={"symptoms": [chest]})
    assert r.status_code == 200
    analysis = r.json()["analysis"]
    assert analysis["riskLevel"] == "critical"
    assert analysis["urgency"] == "emergency"


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {},
        {"symptoms": []},
        {"symptoms": "headache"},
        {"symptoms": [{"name": "", "severity": "mild", "duration": "1 day"}]},
        {"symptoms": [{"name": "headache", "severity": "unbearable", "duration": "1 day"}]},
    ],
)
def test_symptom_check_invalid_body(client, payload):
    r = client.post("/api/symptom-check", json=payload)
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid symptoms data"}


def test_symptom_check_analyzer_crash_is_500(client):
    with patch.object(main, "analyze_symptoms", side_effect=RuntimeError("boom")):
        r = client.post("/api/symptom-check", json={"symptoms": [HEADACHE]})
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}


def test_symptom_check_save_failure_still_returns_analysis(client):
    with patch.object(main, "save_symptom_check", side_effect=RuntimeError("disk full")):
        r = client.post("/api/symptom-check", json={"symptoms": [HEADACHE]})
    assert r.status_code == 200
    assert r.json()["checkId"] is None


def test_stored_check_lookup(client):
    check_id = client.post("/api/symptom-check", json={"symptoms": [HEADACHE]}).json()["checkId"]
    r = client.get(f"/api/symptom-checks/{check_id}")
    assert r.status_code == 200
    body = r.json()
    assert body["id"] == check_id
    assert body["symptoms"][0]["name"] == "headache"
    assert body["riskLevel"] == "medium"
    assert body["status"] == "pending"


def test_stored_check_unknown(client):
    r = client.get("/api/symptom-checks/999999")
    assert r.status_code == 404
    assert r.json() == {"error": "Not found"}


def test_metrics_counts_requests(client):
    before = client.get("/metrics").json()["requests_total"]
    client.post("/api/symptom-check", json={"symptoms": [HEADACHE]})
    after = client.get("/metrics").json()
    assert after["requests_total"] == before + 1
    assert after["by_risk_level"].get("medium", 0) >= 1


def test_sms_sent(client):
    with patch.object(main, "send_sms", return_value=SmsResult(message_id="msg-1")) as send:
        r = client.post("/api/sms", json=ALERT)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["messageId"] == "msg-1"
    assert body["timestamp"]
    send.assert_called_once_with("+1234567890", ALERT["content"])


def test_sms_recipient_name_optional(client):
    payload = {k: v for k, v in ALERT.items() if k != "recipientName"}
    with patch.object(main, "send_sms", return_value=SmsResult(message_id="msg-2")):
        r = client.post("/api/sms", json=payload)
    assert r.status_code == 200


@pytest.mark.parametrize(
    "override",
    [
        {"phoneNumber": "1234567890"},
        {"phoneNumber": "+0123"},
        {"messageType": "reminder"},
        {"content": "hi"},
    ],
)
def test_sms_invalid_body(client, override):
    with patch.object(main, "send_sms") as send:
        r = client.post("/api/sms", json={**ALERT, **override})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Bad Request"
    assert body["message"] == "Invalid request data"
    assert body["validation"]
    send.assert_not_called()


def test_sms_not_configured(client):
    with patch.object(main, "is_sms_configured", return_value=False):
        r = client.post("/api/sms", json=ALERT)
    assert r.status_code == 503
    assert r.json()["code"] == "SMS_NOT_CONFIGURED"


def test_sms_send_failure(client):
    with patch.object(main, "send_sms", side_effect=SmsSendError("opted out", code="OptedOut")):
        r = client.post("/api/sms", json=ALERT)
    assert r.status_code == 500
    assert r.json()["code"] == "SMS_SEND_FAILED"


def test_sms_without_aws_region_returns_json_error(client):
    before = client.get("/metrics").json()["sms_failed_total"]
    with patch.object(sender, "_client", None), patch.object(sender.boto3, "client", side_effect=NoRegionError()):
        r = client.post("/api/sms", json=ALERT)
    assert r.status_code == 500
    assert r.json() == {"error": "Internal Server Error", "message": "Failed to send SMS", "code": "SMS_SEND_FAILED"}
    assert client.get("/metrics").json()["sms_failed_total"] == before + 1


@pytest.mark.parametrize("raw", ["{not json", "", "symptoms=headache"])
def test_symptom_check_malformed_json_is_400(client, raw):
    r = client.post("/api/symptom-check", content=raw, headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid symptoms data"}


def test_sms_malformed_json_is_400(client):
    r = client.post("/api/sms", content="{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Bad Request"
    assert body["message"] == "Invalid request data"
    assert body["validation"]


def test_sms_malformed_json_when_not_configured_is_503(client):
    with patch.object(main, "is_sms_configured", return_value=False):
        r = client.post("/api/sms", content="{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 503
    assert r.json()["code"] == "SMS_NOT_CONFIGURED"


def test_unknown_check_id_type_keeps_default_validation(client):
    r = client.get("/api/symptom-checks/abc")
    assert r.status_code == 422
